"""
Module: tests/unit/test_mutf7.py

What:
    Exercise the modified UTF-7 mailbox-name codec.

Why:
    A wrongly decoded folder name is re-encoded into a different mailbox, so
    round-trips must be exact and malformed names must be rejected.
"""

import pytest

from mailaccess.errors import EncodingError
from mailaccess.imap.mutf7 import decode_mailbox_name, encode_mailbox_name


@pytest.mark.parametrize(
    "name, wire",
    [
        ("INBOX", "INBOX"),
        ("Entwürfe", "Entw&APw-rfe"),
        ("Tom & Jerry", "Tom &- Jerry"),
        ("~peter/mail/台北/日本語", "~peter/mail/&U,BTFw-/&ZeVnLIqe-"),
    ],
)
def test_known_vectors(name, wire):
    assert encode_mailbox_name(name) == wire
    assert decode_mailbox_name(wire) == name


@pytest.mark.parametrize("name", ["Boîte d'envoi", "Отправленные", "📁 Projects", "a&b&c", ""])
def test_roundtrip(name):
    assert decode_mailbox_name(encode_mailbox_name(name)) == name


def test_decode_accepts_bytes():
    assert decode_mailbox_name(b"Entw&APw-rfe") == "Entwürfe"


@pytest.mark.parametrize(
    "wire",
    [
        "Entw&APw",  # unterminated shift
        "Bad&AP!-x",  # character outside modified base64
        "Tab\there",  # control character
        "Entwürfe",  # raw non-ASCII
    ],
)
def test_malformed_names_raise(wire):
    with pytest.raises(EncodingError):
        decode_mailbox_name(wire)


def test_encode_rejects_non_string():
    with pytest.raises(EncodingError):
        encode_mailbox_name(42)
