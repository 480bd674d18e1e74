"""CLI wiring tests for the mailaccess Typer application.

What:
  Invoke every command through :class:`typer.testing.CliRunner` with
  :func:`mailaccess.cli.open_connection` patched to return a connection over
  an in-memory transport.

Why:
  The CLI translates options into filters and prints decoded values; these
  tests catch regressions in that translation and in error reporting.

How:
  ``tests/unit`` is put on ``sys.path`` so the shared :mod:`fakes` module can
  build the transport; assertions inspect stdout, exit codes and the
  recorded transport calls.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).resolve().parent / "unit"))

from fakes import FakeTransport, make_message  # noqa: E402

from mailaccess.cli import app  # noqa: E402
from mailaccess.config import parse_config  # noqa: E402
from mailaccess.connection import Connection  # noqa: E402
from mailaccess.imap.session import MailboxSession  # noqa: E402

runner = CliRunner()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(
        {
            "INBOX": {
                1: make_message("Hello", sender="=?UTF-8?B?SsO8cmdlbg==?= <j@example.de>"),
                2: make_message("Report", text="quarterly numbers"),
                3: make_message("Later"),
            },
            "Entw&APw-rfe": {},
        }
    )


@pytest.fixture
def wired(monkeypatch: pytest.MonkeyPatch, config_payload, transport):
    opened = []

    def factory(config_path):
        opened.append(config_path)
        config = parse_config(dict(config_payload, logging={"level": "ERROR"}))
        return Connection(config, MailboxSession.from_config(config, transport=transport))

    monkeypatch.setattr("mailaccess.cli.open_connection", factory)
    return opened


def test_mailboxes_lists_decoded_names(wired) -> None:
    result = runner.invoke(app, ["mailboxes", "--config", "/etc/mailaccess.yaml"])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["Entwürfe", "INBOX"]
    assert [str(path) for path in wired] == ["/etc/mailaccess.yaml"]


def test_search_builds_filter(wired, transport) -> None:
    result = runner.invoke(
        app,
        ["search", "INBOX", "--subject", "Report", "--since", "2024-03-05", "--unseen", "--newest-first", "--limit", "2"],
    )
    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["3", "2"]
    predicate = transport.calls[-1][1]
    assert predicate == 'SUBJECT "Report" SINCE "05-Mar-2024" UNSEEN'


def test_headers_render_contacts(wired) -> None:
    result = runner.invoke(app, ["headers", "INBOX", "1"])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert "Subject: Hello" in lines
    assert "From: Jürgen <j@example.de>" in lines
    assert "To: bob@example.org" in lines


def test_body_prints_text(wired, transport) -> None:
    result = runner.invoke(app, ["body", "INBOX", "2"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "quarterly numbers"
    assert all(call[3] is True for call in transport.calls if call[0] == "fetch_body")


def test_library_errors_exit_with_code_one(wired) -> None:
    result = runner.invoke(app, ["headers", "Nope", "1"])
    assert result.exit_code == 1
    assert "Mailbox 'Nope' not found" in result.output


def test_missing_configuration_is_reported(tmp_path) -> None:
    result = runner.invoke(app, ["mailboxes", "--config", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 1
    assert "Configuration file missing" in result.output
