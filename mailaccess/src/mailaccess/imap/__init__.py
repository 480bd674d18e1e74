"""IMAP mapping layer: codec, filter compiler, parsers, transport and driver.

What:
  Surface the leaf helpers used by :class:`~mailaccess.imap.session.MailboxSession`.

Interfaces:
  ``encode_mailbox_name``/``decode_mailbox_name``, ``FilterCompiler``,
  ``parse_headers``, ``assemble_body``, ``build_structure``,
  ``MailboxTransport``/``ImapClientTransport``/``ServerSpec``.

The session itself lives in :mod:`mailaccess.imap.session` and is imported
from there; it depends on :mod:`mailaccess.config`, which in turn needs
:class:`ServerSpec` from this package.
"""

from .body import BodyChunk, TransferEncoding, assemble_body
from .headers import HeaderMap, parse_headers
from .mutf7 import decode_mailbox_name, encode_mailbox_name
from .search import FilterCompiler
from .structure import MessagePart, MessageStructure, PartDescriptor, build_structure
from .transport import ImapClientTransport, MailboxTransport, ServerSpec

__all__ = [
    "BodyChunk",
    "FilterCompiler",
    "HeaderMap",
    "ImapClientTransport",
    "MailboxTransport",
    "MessagePart",
    "MessageStructure",
    "PartDescriptor",
    "ServerSpec",
    "TransferEncoding",
    "assemble_body",
    "build_structure",
    "decode_mailbox_name",
    "encode_mailbox_name",
    "parse_headers",
]
