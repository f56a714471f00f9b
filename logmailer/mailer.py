from __future__ import annotations

import logging
import mimetypes
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol, Sequence

from .email_formatter import METADATA_FILENAME, build_metadata_json
from .models import Config, Document

logger = logging.getLogger(__name__)


class MailError(Exception):
    """Raised when mail sending fails."""


class MailSender(Protocol):
    provider: str

    def send(self, message: EmailMessage) -> None: ...


@dataclass(frozen=True)
class MailConfig:
    server: str
    port: int
    secure: bool
    user: str
    password: str


class SMTPMailer:
    provider = "smtp"

    def __init__(self, config: MailConfig):
        self._config = config

    def _connect(self) -> smtplib.SMTP:
        if self._config.secure:
            return smtplib.SMTP_SSL(
                self._config.server, self._config.port, context=ssl.create_default_context()
            )
        return smtplib.SMTP(self._config.server, self._config.port)

    @staticmethod
    def _upgrade(client: smtplib.SMTP) -> None:
        client.ehlo()
        if client.has_extn("starttls"):
            client.starttls(context=ssl.create_default_context())
            client.ehlo()

    def send(self, message: EmailMessage) -> None:
        logger.info(
            "Connecting to %s:%s (secure=%s)",
            self._config.server,
            self._config.port,
            self._config.secure,
        )
        try:
            with self._connect() as client:
                if not self._config.secure:
                    self._upgrade(client)
                client.login(self._config.user, self._config.password)
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailError(f"Failed to send email: {exc}") from exc
        logger.info("Mail sent to %s", message["To"])


def _add_attachment(message: EmailMessage, doc: Document) -> None:
    mime_type, _ = mimetypes.guess_type(doc.filename)
    maintype, _, subtype = (mime_type or "application/octet-stream").partition("/")
    filename = doc.filename or "attachment"
    if maintype == "text":
        message.add_attachment(doc.content, subtype=subtype, charset="utf-8", filename=filename)
        return
    message.add_attachment(
        doc.content.encode("utf-8"),
        maintype=maintype,
        subtype=subtype,
        filename=filename,
        params={"charset": "utf-8"},
    )


def build_message(
    *,
    from_addr: str,
    to_addr: str,
    subject: str,
    text_body: str,
    html_body: str,
    attachments: Sequence[Document] = (),
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = from_addr
    message["To"] = to_addr
    message["Subject"] = subject
    message.set_content(text_body)
    message.add_alternative(html_body, subtype="html")
    for doc in attachments:
        _add_attachment(message, doc)
    return message


def build_log_message(config: Config, text_body: str, html_body: str) -> EmailMessage:
    """Address the rendered bodies; metadata.json always leads the attachments."""
    metadata = Document(filename=METADATA_FILENAME, content=build_metadata_json(config))
    return build_message(
        from_addr=config.full_from,
        to_addr=config.full_to,
        subject=config.full_subject,
        text_body=text_body,
        html_body=html_body,
        attachments=[metadata, *config.attachments],
    )


def build_mailer(config: Config) -> MailSender:
    return SMTPMailer(
        MailConfig(
            server=config.server,
            port=config.port,
            secure=config.secure,
            user=config.user,
            password=config.password,
        )
    )
