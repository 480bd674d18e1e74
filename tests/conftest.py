"""Pytest configuration shared by every suite.

What:
  Put the in-repo ``mailaccess/src`` directory on ``sys.path`` and keep the
  configuration environment variable from leaking into tests.

Why:
  Tests must exercise the source tree rather than an installed wheel, and a
  developer's own ``MAILACCESS_CONFIG_PATH`` must not change loader results.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "mailaccess" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

import pytest


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch: pytest.MonkeyPatch):
    """Remove ``MAILACCESS_CONFIG_PATH`` for the duration of each test."""

    monkeypatch.delenv("MAILACCESS_CONFIG_PATH", raising=False)
    yield


@pytest.fixture
def config_payload():
    """Minimal valid configuration mapping."""

    return {
        "server": {
            "host": "imap.example.org",
            "username": "alice",
            "password": "s3cret",
        },
    }
