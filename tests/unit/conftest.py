"""Pytest fixtures for unit tests requiring IMAP fakes.

What:
  Make ``tests/unit`` importable and expose fixtures that wire a
  :class:`~mailaccess.imap.session.MailboxSession` and a
  :class:`~mailaccess.connection.Connection` to :class:`FakeTransport`.

Why:
  Driver and facade tests assert on transport interactions; a fresh fake per
  test keeps them independent.
"""

import io
import sys
from pathlib import Path

import pytest

UNIT_DIR = Path(__file__).resolve().parent
if str(UNIT_DIR) not in sys.path:
    sys.path.insert(0, str(UNIT_DIR))

from fakes import FakeTransport, make_message

from mailaccess.config import parse_config
from mailaccess.connection import Connection
from mailaccess.imap.session import MailboxSession
from mailaccess.utils.logging import get_logger


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def transport():
    """Fake transport with INBOX (two messages), Archive and a non-ASCII folder."""

    return FakeTransport(
        {
            "INBOX": {1: make_message("First"), 2: make_message("Second", text="second body")},
            "Archive": {7: make_message("Old")},
            "Entw&APw-rfe": {},
        }
    )


@pytest.fixture
def config(config_payload):
    return parse_config(config_payload)


@pytest.fixture
def session(config, transport, log_stream):
    """Disconnected session driving ``transport``."""

    return MailboxSession(
        config.server.spec(),
        config.server.username,
        config.server.password,
        transport=transport,
        logger=get_logger("test.session", "DEBUG", log_stream),
    )


@pytest.fixture
def connection(config, session):
    return Connection(config, session)
