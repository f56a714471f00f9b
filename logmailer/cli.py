from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import yaml

from . import __version__
from .config import DEFAULT_CONF_PATH, ConfigurationError
from .documents import DocumentError
from .mailer import MailError
from .orchestrator import run

EXIT_CONFIG_ERROR = 1
EXIT_DOCUMENT_ERROR = 2
EXIT_MAIL_ERROR = 3

# Flags forwarded into the option layers
OPTION_KEYS = (
    "conf",
    "error",
    "source",
    "host",
    "server",
    "port",
    "secure",
    "user",
    "pass",
    "plus",
    "from",
    "to",
    "attach",
    "document",
    "both",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logmailer",
        description="Format a log message and documents into an HTML email and send it via SMTP.",
    )
    parser.add_argument(
        "--conf",
        "-c",
        default=os.getenv("LOGMAILER_CONF") or DEFAULT_CONF_PATH,
        help="path to the YAML config file (default: %(default)s)",
    )
    parser.add_argument("--error", "-e", help="integer error level from -2 (testing) to 2 (error)")
    parser.add_argument("--source", "-s", help="source of this log (the program that generated it)")
    parser.add_argument("--host", help="host name shown in the subject and sender (default: local hostname)")
    parser.add_argument("--server", help="SMTP server")
    parser.add_argument("--port", help="SMTP port")
    parser.add_argument(
        "--secure",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="use implicit TLS (default: on)",
    )
    parser.add_argument("--user", help="SMTP user")
    parser.add_argument("--pass", help="SMTP password")
    parser.add_argument(
        "--plus",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="tag the recipient address as local+log+HOST+SOURCE@domain",
    )
    parser.add_argument("--from", help="sender address")
    parser.add_argument("--to", help="recipient address")
    parser.add_argument("--attach", "-a", action="append", default=[], metavar="PATH", help="attach the file at PATH")
    parser.add_argument(
        "--document",
        "-d",
        action="append",
        default=[],
        metavar="PATH",
        help="embed the contents of the file at PATH in the email body",
    )
    parser.add_argument(
        "--both",
        "-b",
        action="append",
        default=[],
        metavar="PATH",
        help="attach the file at PATH and embed its contents",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="log progress to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("subject", nargs="?", metavar="SUBJECT", help="email subject line")
    parser.add_argument("message", nargs="*", metavar="MESSAGE", help="log message; words are joined with spaces")
    return parser


def options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    values = vars(args)
    return {key: values.get(key) for key in OPTION_KEYS}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_intermixed_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    message = " ".join(args.message)
    try:
        conf = run(options_from_args(args), args.subject, message)
    except (ConfigurationError, yaml.YAMLError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except DocumentError as exc:
        print(f"Document error: {exc}", file=sys.stderr)
        return EXIT_DOCUMENT_ERROR
    except MailError as exc:
        print(f"Mail error: {exc}", file=sys.stderr)
        return EXIT_MAIL_ERROR

    print(f'Sent mail: {conf.from_email} -> {conf.full_to} "{conf.full_subject}"')
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
