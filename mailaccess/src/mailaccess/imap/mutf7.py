"""Modified UTF-7 codec for IMAP mailbox names.

What:
  Convert mailbox names between the Unicode strings exposed on the mailaccess
  API and the modified UTF-7 form IMAP servers use on the wire (RFC 3501
  section 5.1.3).

Why:
  Servers list and expect folder names such as ``Entw&APw-rfe`` for
  ``Entwürfe``. Decoding must be strict: a silently mangled folder name would
  later be re-encoded into a *different* mailbox and select or delete the
  wrong folder.

How:
  Encoding and decoding are delegated to :mod:`imapclient.imap_utf7`. Before
  decoding, :func:`_validate` walks the wire string and rejects anything the
  lenient upstream decoder would accept silently (unterminated shifts,
  characters outside the modified base64 alphabet, raw non-ASCII).

Interfaces:
  :func:`encode_mailbox_name`, :func:`decode_mailbox_name`.

Invariants & Safety:
  - ``decode_mailbox_name(encode_mailbox_name(name)) == name`` for every
    string representable in UTF-16.
  - Both functions are pure.
"""
from __future__ import annotations

import string
from typing import Union

from imapclient import imap_utf7

from ..errors import EncodingError

_SHIFT = "&"
_UNSHIFT = "-"
_BASE64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+,")


def encode_mailbox_name(name: str) -> str:
    """Return the modified UTF-7 wire form of ``name``."""

    if not isinstance(name, str):
        raise EncodingError(f"mailbox name must be str, got {type(name).__name__}")
    encoded = imap_utf7.encode(name)
    return encoded.decode("ascii") if isinstance(encoded, bytes) else encoded


def decode_mailbox_name(wire: Union[str, bytes]) -> str:
    """Decode a modified UTF-7 mailbox name into a Unicode string.

    What:
      Validate ``wire`` and convert it to the human-readable folder name.

    Why:
      Folder listings come straight from the server; malformed names must be
      reported instead of being decoded into something plausible.

    How:
      Normalise to ASCII bytes, run :func:`_validate`, then let
      :func:`imapclient.imap_utf7.decode` do the conversion. UTF-16 decoding
      errors from the shifted sections are converted to
      :class:`~mailaccess.errors.EncodingError`.

    Args:
      wire: Mailbox name as received from the server.

    Returns:
      The decoded mailbox name.

    Raises:
      EncodingError: If ``wire`` is not valid modified UTF-7.
    """

    if isinstance(wire, str):
        try:
            raw = wire.encode("ascii")
        except UnicodeEncodeError as exc:
            raise EncodingError(f"non-ASCII character in mailbox name {wire!r}") from exc
    elif isinstance(wire, (bytes, bytearray)):
        raw = bytes(wire)
    else:
        raise EncodingError(f"mailbox name must be str or bytes, got {type(wire).__name__}")
    _validate(raw)
    try:
        return imap_utf7.decode(raw)
    except (UnicodeError, ValueError) as exc:
        raise EncodingError(f"undecodable mailbox name {raw!r}: {exc}") from exc


def _validate(raw: bytes) -> None:
    """Raise :class:`EncodingError` unless ``raw`` is well-formed modified UTF-7."""

    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError as exc:
        raise EncodingError(f"non-ASCII byte in mailbox name {raw!r}") from exc

    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != _SHIFT:
            if not 0x20 <= ord(char) <= 0x7E:
                raise EncodingError(f"non-printable character in mailbox name {raw!r}")
            index += 1
            continue
        end = text.find(_UNSHIFT, index + 1)
        if end == -1:
            raise EncodingError(f"unterminated shift sequence in mailbox name {raw!r}")
        chunk = text[index + 1 : end]
        if chunk:
            if any(c not in _BASE64_ALPHABET for c in chunk):
                raise EncodingError(f"invalid modified base64 in mailbox name {raw!r}")
            # a shifted run encodes whole UTF-16 code units
            if (len(chunk) * 6) // 8 % 2:
                raise EncodingError(f"truncated UTF-16 sequence in mailbox name {raw!r}")
        index = end + 1


__all__ = ["encode_mailbox_name", "decode_mailbox_name"]
