from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

# (level, label) indexed by error + 2
LEVELS: Tuple[Tuple[str, str], ...] = (
    ("TESTING", "TEST"),
    ("DEBUG", "DBG"),
    ("OK", ""),
    ("WARNING", "WRN"),
    ("ERROR", "ERR"),
)

MIN_ERROR = -2
MAX_ERROR = 2


@dataclass(frozen=True)
class Document:
    filename: str
    content: str


@dataclass(frozen=True)
class Config:
    host: str
    source: str
    from_email: str
    to_email: str
    server: str
    port: int
    user: str
    password: str = field(repr=False)
    subject: str
    secure: bool = True
    plus: bool = False
    message: str = ""
    error: int = 0
    level: str = "OK"
    label: str = ""
    date: str = ""
    platform: str = ""
    version: str = ""
    full_subject: str = ""
    full_from: str = ""
    full_to: str = ""
    documents: Tuple[Document, ...] = ()
    attachments: Tuple[Document, ...] = ()

    @property
    def error_name(self) -> str:
        return f"{self.error}:{self.level}"

    @property
    def text(self) -> Optional[str]:
        return self.message or None

    @property
    def metadata(self) -> Dict[str, Any]:
        """Summary record serialized into the metadata.json attachment."""
        return {
            "version": self.version,
            "host": self.host,
            "source": self.source,
            "error": self.error,
            "level": self.level,
            "date": self.date,
            "subject": self.subject,
            "text": self.text,
        }
