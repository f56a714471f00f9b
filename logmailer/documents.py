from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Tuple

from .models import Document

logger = logging.getLogger(__name__)


class DocumentError(Exception):
    """Raised when an attachment or embedded document cannot be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path


def read_document(path: str) -> Document:
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise DocumentError(path, exc.strerror or str(exc)) from exc
    return Document(filename=file_path.name, content=content)


def as_document(entry: Any) -> Document:
    """Coerce a pre-built {filename, content} entry into a Document."""
    if isinstance(entry, Document):
        return entry
    if isinstance(entry, Mapping) and "content" in entry:
        return Document(filename=str(entry.get("filename") or ""), content=str(entry["content"]))
    raise ValueError(f"Invalid document entry: {entry!r}")


def resolve_documents(
    attach: Iterable[str],
    document: Iterable[str],
    both: Iterable[str],
    *,
    attachments: Iterable[Any] = (),
    documents: Iterable[Any] = (),
    boths: Iterable[Any] = (),
) -> Tuple[List[Document], List[Document]]:
    """Read every listed path and split the results into attachments and embedded documents.

    Pre-built entries come first, followed by files read from disk in the
    order attach, document, both. Entries of ``both``/``boths`` land in both lists.
    """
    resolved_attachments = [as_document(entry) for entry in attachments]
    resolved_documents = [as_document(entry) for entry in documents]

    for path in attach:
        resolved_attachments.append(read_document(path))
    for path in document:
        resolved_documents.append(read_document(path))
    for path in both:
        doc = read_document(path)
        resolved_attachments.append(doc)
        resolved_documents.append(doc)
    for entry in boths:
        doc = as_document(entry)
        resolved_attachments.append(doc)
        resolved_documents.append(doc)

    logger.info(
        "Resolved %s attachments and %s embedded documents",
        len(resolved_attachments),
        len(resolved_documents),
    )
    return resolved_attachments, resolved_documents
