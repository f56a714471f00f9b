from __future__ import annotations

import logging
import os
import re
import socket
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from . import __version__
from .documents import resolve_documents
from .models import LEVELS, MAX_ERROR, MIN_ERROR, Config

logger = logging.getLogger(__name__)

# --------------------------------
# Settings

DEFAULT_CONF_PATH = "/etc/logmailer.yaml"

ENV_PREFIX = "LOGMAILER_"

# Options that may be set through LOGMAILER_<NAME>
ENV_KEYS = (
    "host",
    "source",
    "from",
    "to",
    "plus",
    "server",
    "port",
    "secure",
    "user",
    "pass",
    "error",
)

# Validated in this order; the first missing one is reported
REQUIRED_FIELDS = (
    ("from", "no email configured to send from"),
    ("to", "no email configured to send to"),
    ("server", "no mail server configured"),
    ("port", "no port number configured"),
    ("user", "no user configured"),
    ("pass", "no password configured"),
    ("subject", "no subject given"),
)

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}

# Leading integer, as parseInt reads "2", "1.0" or "3 (warn)"
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_LINE_BREAK_RE = re.compile(r"\s*[\r\n]+\s*")
_WHITESPACE_RE = re.compile(r"\s+")
# --------------------------------


class ConfigurationError(Exception):
    """Raised when the merged configuration is missing or has an invalid field."""


def default_options(hostname: Optional[str] = None) -> Dict[str, Any]:
    return {
        "secure": True,
        "error": 0,
        "source": "CLI",
        "host": hostname or socket.gethostname(),
    }


def load_config_file(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """Parse the YAML config at ``path``; a missing file yields an empty mapping.

    Malformed YAML propagates as ``yaml.YAMLError``.
    """
    file_path = Path(path)
    if not file_path.exists():
        logger.info("No config file at %s; using defaults", file_path)
        return {}
    with file_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {file_path} must contain a mapping")
    logger.info("Loaded config file %s", file_path)
    return data


def options_from_env(env: Mapping[str, str] | None = None) -> Dict[str, Any]:
    e = env if env is not None else os.environ
    options: Dict[str, Any] = {}
    for key in ENV_KEYS:
        value = e.get(ENV_PREFIX + key.upper())
        if value is None or not value.strip():
            continue
        options[key] = value.strip()
    return options


def merge_layers(*layers: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Compose option layers, later layers winning over earlier ones.

    Typical order is defaults, config file, environment, CLI. A ``None`` value
    or an empty list means "not supplied" and leaves the lower layer alone.
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)) and not value:
                continue
            merged[key] = value
    return merged


def as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"invalid value for {name}: {value!r}")


def parse_error_level(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"invalid error level given: {value!r}")
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        raise ConfigurationError(f"invalid error level given: {value!r}")
    error = int(match.group(1))
    return min(MAX_ERROR, max(MIN_ERROR, error))


def parse_port(value: Any) -> int:
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"invalid port number: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"invalid port number: {value!r}")
    return port


def single_line(value: str) -> str:
    """Collapse line breaks so the value is safe in a mail header."""
    return _LINE_BREAK_RE.sub(" ", value).strip()


def source_segment(source: str) -> str:
    if not source or source.lower() == "system":
        return ""
    return f" {source}"


def build_full_subject(host: str, source: str, label: str, subject: str) -> str:
    label_segment = f" {label}" if label else ""
    return f"{host}{source_segment(source)}{label_segment}: {subject}"


def build_full_from(host: str, source: str, from_email: str) -> str:
    return f'"{host}{source_segment(source)}" <{from_email}>'


def build_full_to(to_email: str, host: str, source: str, plus: bool) -> str:
    """Tag the recipient's local part with host and source when plus-addressing is on."""
    if not plus:
        return to_email
    local, at, domain = to_email.partition("@")
    tag = "+".join(_WHITESPACE_RE.sub("-", part.strip()) for part in ("log", host, source))
    return f"{local}+{tag}{at}{domain}"


def validate_required(options: Mapping[str, Any]) -> None:
    for key, message in REQUIRED_FIELDS:
        value = options.get(key)
        if not value or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(message)


def build_config(
    options: Mapping[str, Any],
    subject: Optional[str],
    message: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> Config:
    """Validate merged options and compute every derived field.

    ``options`` is the output of :func:`merge_layers`. Document paths are read
    from disk here, so the returned config is complete and ready to render.
    """
    conf: Dict[str, Any] = dict(options)
    conf["subject"] = subject
    conf["message"] = message or ""

    validate_required(conf)

    error = parse_error_level(conf.get("error", 0))
    level, label = LEVELS[error - MIN_ERROR]
    port = parse_port(conf["port"])
    secure = parse_bool("secure", conf.get("secure", True))
    plus = parse_bool("plus", conf.get("plus", False))

    host = single_line(str(conf.get("host") or socket.gethostname()))
    source = single_line(str(conf.get("source") or ""))
    from_email = single_line(str(conf["from"]))
    to_email = single_line(str(conf["to"]))
    subject = single_line(str(subject))

    try:
        attachments, documents = resolve_documents(
            [str(p) for p in as_list(conf.get("attach"))],
            [str(p) for p in as_list(conf.get("document"))],
            [str(p) for p in as_list(conf.get("both"))],
            attachments=as_list(conf.get("attachments")),
            documents=as_list(conf.get("documents")),
            boths=as_list(conf.get("boths")),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    timestamp = (now or datetime.now()).astimezone()

    return Config(
        host=host,
        source=source,
        from_email=from_email,
        to_email=to_email,
        server=str(conf["server"]),
        port=port,
        user=str(conf["user"]),
        password=str(conf["pass"]),
        subject=subject,
        secure=secure,
        plus=plus,
        message=conf["message"],
        error=error,
        level=level,
        label=label,
        date=timestamp.isoformat(),
        platform=sys.platform,
        version=__version__,
        full_subject=build_full_subject(host, source, label, subject),
        full_from=build_full_from(host, source, from_email),
        full_to=build_full_to(to_email, host, source, plus),
        documents=tuple(documents),
        attachments=tuple(attachments),
    )
