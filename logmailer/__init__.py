"""Email logging tool: send log messages and documents as an HTML email over SMTP."""

__version__ = "1.2.0"

__all__ = [
    "config",
    "models",
    "documents",
    "html_email",
    "email_formatter",
    "mailer",
    "orchestrator",
    "cli",
]
