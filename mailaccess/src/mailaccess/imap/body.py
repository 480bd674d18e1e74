"""Decode fetched body parts and join them into one text body.

What:
  Resolve the content-transfer-encoding of each fetched part (base64,
  quoted-printable or identity) and concatenate the decoded text.

Why:
  IMAP returns body sections exactly as stored. Callers want text, and a
  single damaged part must not make the whole body unreadable.

How:
  :func:`decode_part` decodes one chunk with :mod:`binascii` (lenient base64)
  or :mod:`quopri`, then converts bytes to text using the part charset.
  :func:`assemble_body` joins the results with a blank line.

Interfaces:
  :class:`TransferEncoding`, :class:`BodyChunk`, :func:`decode_part`,
  :func:`assemble_body`.

Invariants & Safety:
  - Decoding never raises for malformed payloads; base64 garbage yields what
    could be decoded.
  - The joiner is a plain ``"\\n\\n"``; it does not rebuild MIME boundaries.
"""
from __future__ import annotations

import binascii
import quopri
from enum import Enum
from typing import Iterable, NamedTuple, Optional, Union

PART_SEPARATOR = "\n\n"


class TransferEncoding(str, Enum):
    """Content-transfer-encodings reported in ``BODYSTRUCTURE``."""

    SEVEN_BIT = "7bit"
    EIGHT_BIT = "8bit"
    BINARY = "binary"
    BASE64 = "base64"
    QUOTED_PRINTABLE = "quoted-printable"
    OTHER = "other"

    @classmethod
    def from_wire(cls, value: Union[str, bytes, None]) -> "TransferEncoding":
        if value is None:
            return cls.SEVEN_BIT
        if isinstance(value, bytes):
            value = value.decode("ascii", errors="replace")
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.OTHER


class BodyChunk(NamedTuple):
    """Raw bytes of one fetched part with the metadata needed to decode it."""

    data: bytes
    encoding: TransferEncoding = TransferEncoding.SEVEN_BIT
    charset: Optional[str] = None


_BASE64_BYTES = frozenset(b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/")


def _decode_base64(data: bytes) -> bytes:
    cleaned = bytes(c for c in data if c in _BASE64_BYTES)
    # a single leftover sextet cannot encode a byte
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += b"=" * (-len(cleaned) % 4)
    try:
        return binascii.a2b_base64(cleaned)
    except binascii.Error:
        return b""


def _to_text(data: bytes, charset: Optional[str]) -> str:
    try:
        return data.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return data.decode("utf-8", errors="replace")


def decode_part(chunk: BodyChunk) -> str:
    """Return the decoded text of a single body part."""

    data = chunk.data
    if isinstance(data, str):
        data = data.encode("utf-8", errors="surrogateescape")
    if chunk.encoding is TransferEncoding.BASE64:
        data = _decode_base64(data)
    elif chunk.encoding is TransferEncoding.QUOTED_PRINTABLE:
        data = quopri.decodestring(data)
    return _to_text(data, chunk.charset)


def assemble_body(parts: Iterable[Union[BodyChunk, tuple]]) -> str:
    """Decode every part in order and join them with a blank line.

    Args:
      parts: :class:`BodyChunk` objects or ``(data, encoding[, charset])``
        tuples. Encodings may be given as :class:`TransferEncoding` or their
        wire names.

    Returns:
      The concatenated body text.
    """

    decoded = []
    for part in parts:
        chunk = part if isinstance(part, BodyChunk) else BodyChunk(*part)
        if not isinstance(chunk.encoding, TransferEncoding):
            chunk = chunk._replace(encoding=TransferEncoding.from_wire(chunk.encoding))
        decoded.append(decode_part(chunk))
    return PART_SEPARATOR.join(decoded)


__all__ = ["BodyChunk", "PART_SEPARATOR", "TransferEncoding", "assemble_body", "decode_part"]
