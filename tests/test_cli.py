from __future__ import annotations

import pytest

from logmailer import cli, orchestrator
from logmailer.config import ENV_KEYS, ENV_PREFIX
from logmailer.mailer import MailError


class RecordingMailer:
    provider = "fake"

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send(self, message) -> None:
        if self.fail:
            raise MailError("Failed to send email: connection refused")
        self.sent.append(message)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS + ("conf",):
        monkeypatch.delenv(ENV_PREFIX + key.upper(), raising=False)


@pytest.fixture
def mailer(monkeypatch):
    fake = RecordingMailer()
    monkeypatch.setattr(orchestrator, "build_mailer", lambda conf: fake)
    return fake


def _args(tmp_path, *extra: str) -> list:
    return [
        "--conf",
        str(tmp_path / "absent.yaml"),
        "--from",
        "logs@example.com",
        "--to",
        "ops@example.com",
        "--server",
        "smtp.example.com",
        "--port",
        "465",
        "--user",
        "u",
        "--pass",
        "p",
        "--host",
        "web01",
        *extra,
    ]


def test_success_prints_confirmation(tmp_path, mailer, capsys):
    code = cli.main(_args(tmp_path, "-e", "1", "-s", "cron", "disk", "usage", "at", "91%"))

    assert code == 0
    out = capsys.readouterr().out
    assert out.strip() == 'Sent mail: logs@example.com -> ops@example.com "web01 cron WRN: disk"'
    assert len(mailer.sent) == 1
    html = mailer.sent[0].get_body(preferencelist=("html",)).get_content()
    assert "usage at 91%" in html


def test_options_may_follow_positionals(tmp_path, mailer, capsys):
    code = cli.main(_args(tmp_path, "subject", "-e", "2", "--plus", "message"))

    assert code == 0
    out = capsys.readouterr().out
    assert 'ops+log+web01+CLI@example.com "web01 CLI ERR: subject"' in out


def test_repeatable_document_flags(tmp_path, mailer):
    first = tmp_path / "one.log"
    second = tmp_path / "two.log"
    first.write_text("one", encoding="utf-8")
    second.write_text("two", encoding="utf-8")

    code = cli.main(_args(tmp_path, "-a", str(first), "-b", str(second), "subject"))

    assert code == 0
    filenames = [a.get_filename() for a in mailer.sent[0].iter_attachments()]
    assert filenames == ["metadata.json", "one.log", "two.log"]


def test_configuration_error_exits_nonzero(tmp_path, mailer, capsys):
    code = cli.main(["--conf", str(tmp_path / "absent.yaml"), "subject"])

    assert code == cli.EXIT_CONFIG_ERROR
    captured = capsys.readouterr()
    assert captured.err.strip() == "Configuration error: no email configured to send from"
    assert captured.out == ""
    assert mailer.sent == []


def test_malformed_config_file_is_a_configuration_error(tmp_path, mailer, capsys):
    conf = tmp_path / "broken.yaml"
    conf.write_text("server: [unclosed\n", encoding="utf-8")

    code = cli.main(["--conf", str(conf), "subject"])

    assert code == cli.EXIT_CONFIG_ERROR
    assert capsys.readouterr().err.startswith("Configuration error:")


def test_missing_document_exits_with_document_error(tmp_path, mailer, capsys):
    code = cli.main(_args(tmp_path, "-d", str(tmp_path / "missing.log"), "subject"))

    assert code == cli.EXIT_DOCUMENT_ERROR
    assert capsys.readouterr().err.startswith("Document error: cannot read")


def test_mail_error_exits_with_mail_error(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(orchestrator, "build_mailer", lambda conf: RecordingMailer(fail=True))

    code = cli.main(_args(tmp_path, "subject"))

    assert code == cli.EXIT_MAIL_ERROR
    assert "connection refused" in capsys.readouterr().err


def test_conf_default_comes_from_environment(monkeypatch):
    monkeypatch.setenv("LOGMAILER_CONF", "/tmp/custom.yaml")
    args = cli.build_parser().parse_args(["subject"])
    assert args.conf == "/tmp/custom.yaml"


def test_flags_left_unset_do_not_override_lower_layers():
    args = cli.build_parser().parse_args(["subject"])
    options = cli.options_from_args(args)
    assert options["secure"] is None
    assert options["plus"] is None
    assert options["attach"] == []


def test_multi_line_subject_is_sent_on_one_line(tmp_path, mailer, capsys):
    code = cli.main(_args(tmp_path, "line1\nline2", "msg"))

    assert code == 0
    assert mailer.sent[0]["Subject"] == "web01 CLI: line1 line2"
    assert '"web01 CLI: line1 line2"' in capsys.readouterr().out
