from __future__ import annotations

import json
from typing import List, Tuple

from . import html_email
from .models import Config

METADATA_FILENAME = "metadata.json"


def metadata_rows(config: Config) -> List[Tuple[str, object]]:
    return [
        ("LOGMAILER", config.version),
        ("HOST", config.host),
        ("SOURCE", config.source),
        ("ERROR", config.error_name),
        ("DATE", config.date),
    ]


def build_metadata_json(config: Config) -> str:
    return json.dumps(config.metadata)


def build_email_body(config: Config) -> Tuple[str, str]:
    """Render the plain-text and HTML bodies for ``config``.

    The LOG block is present only with a message, the DOCUMENTS block only with
    embedded documents; METADATA is always rendered.
    """
    lines: List[str] = []
    html_parts: List[str] = []

    if config.message:
        lines += ["LOG", config.message, ""]
        html_parts.append(html_email.label("LOG"))
        html_parts.append(html_email.preformatted(config.message))

    if config.documents:
        lines.append("DOCUMENTS")
        html_parts.append(html_email.label("DOCUMENTS"))
        for doc in config.documents:
            lines += [f"--- {doc.filename}", doc.content, ""]
            html_parts.append(html_email.subheading(doc.filename))
            html_parts.append(html_email.preformatted(doc.content))

    rows = metadata_rows(config)
    lines.append("METADATA")
    lines += [f"{key}: {value}" for key, value in rows]
    html_parts.append(html_email.label("METADATA"))
    html_parts.append(html_email.table(rows))

    html_body = html_email.wrap_in_email_shell(
        title=config.full_subject,
        body_html="\n".join(html_parts),
    )
    return "\n".join(lines), html_body
