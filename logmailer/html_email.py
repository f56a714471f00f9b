from __future__ import annotations

from html import escape

_FONT = "font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',sans-serif;"
_MONO = "font-family:Menlo,Consolas,'DejaVu Sans Mono',monospace;"

LABEL_STYLE = (
    "background-color:#252525;color:#fefefe;margin:0;font-size:17px;"
    "display:inline-block;padding:0 8px 0 0;border-left:10px solid #252525;" + _FONT
)
CELL_STYLE = (
    "background-color:#fafafa;border-left:10px solid #252525;"
    "padding:8px 16px;margin:0 0 5px 0;"
)
PRE_STYLE = CELL_STYLE + "white-space:pre-wrap;word-wrap:break-word;font-size:13px;" + _MONO
SUBHEADING_STYLE = "margin:8px 0 4px 0;font-size:14px;color:#252525;" + _FONT
TH_STYLE = "text-align:left;padding-right:12px;font-weight:bold;color:#252525;" + _FONT
TD_STYLE = "color:#252525;" + _MONO


def h(value: object) -> str:
    return escape(str(value), quote=True)


def label(text: str) -> str:
    return f'<h1 style="{LABEL_STYLE}">{h(text)}</h1>'


def preformatted(text: str) -> str:
    return f'<pre style="{PRE_STYLE}">{h(text)}</pre>'


def subheading(text: str) -> str:
    return f'<h2 style="{SUBHEADING_STYLE}">{h(text)}</h2>'


def table(rows: list[tuple[str, object]]) -> str:
    cells = "\n".join(
        f'    <tr><th scope="row" style="{TH_STYLE}">{h(key)}</th>'
        f'<td style="{TD_STYLE}">{h(value)}</td></tr>'
        for key, value in rows
    )
    return f'<table style="{CELL_STYLE}border-collapse:collapse;">\n{cells}\n  </table>'


def wrap_in_email_shell(*, title: str, body_html: str) -> str:
    """Build a single self-contained HTML document with inline styles only."""

    return (
        """<!doctype html>
<html>
<head>
  <meta charset=\"UTF-8\" />
  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\" />
  <title>{title}</title>
</head>
<body style=\"background-color:#fefefe;margin:5px;font-size:16px;color:#252525;\">
{body}
</body>
</html>"""
    ).format(title=h(title), body=body_html)
