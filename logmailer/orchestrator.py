from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from . import config
from .email_formatter import build_email_body
from .mailer import MailSender, build_log_message, build_mailer
from .models import Config

logger = logging.getLogger(__name__)


def run(
    cli_options: Mapping[str, Any],
    subject: Optional[str],
    message: Optional[str] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    now: Optional[datetime] = None,
    mailer: Optional[MailSender] = None,
) -> Config:
    """Load, merge and validate the configuration, then send one log email.

    Raises ``ConfigurationError``, ``DocumentError`` or ``MailError``; nothing is
    retried.
    """
    conf_path = cli_options.get("conf") or config.DEFAULT_CONF_PATH
    file_options = config.load_config_file(conf_path)
    options = config.merge_layers(
        config.default_options(),
        file_options,
        config.options_from_env(env),
        {k: v for k, v in cli_options.items() if k != "conf"},
    )
    conf = config.build_config(options, subject, message, now=now)
    logger.info(
        "Prepared log mail level=%s documents=%s attachments=%s",
        conf.level,
        len(conf.documents),
        len(conf.attachments),
    )

    text_body, html_body = build_email_body(conf)
    email = build_log_message(conf, text_body, html_body)

    sender = mailer or build_mailer(conf)
    logger.info("Using mail provider=%s", sender.provider)
    sender.send(email)
    return conf
