"""Parse raw RFC 822 header blocks into decoded header maps.

What:
  Turn the header section fetched with ``BODY.PEEK[HEADER]`` into a
  :class:`HeaderMap`: generic headers as decoded text, ``Subject`` fully
  decoded from MIME encoded-words, and address headers as
  :class:`~mailaccess.contacts.ContactList` objects.

Why:
  Raw header blocks are folded, may mix charsets inside one field, and are
  frequently malformed. Callers want clean values and must not lose a whole
  message because one header is broken.

How:
  :func:`unfold_headers` splits on line feeds and glues continuation lines
  onto the previous header. :func:`parse_headers` then decodes each value by
  case-insensitive name using the unstructured header parser of
  :mod:`email.headerregistry` for encoded-words and
  :func:`email.utils.getaddresses` for address lists.
  Decode failures fall back to the trimmed raw value and are logged.

Interfaces:
  :class:`HeaderMap`, :func:`unfold_headers`, :func:`parse_headers`,
  :func:`decode_mime_text`, :func:`parse_contacts`.

Invariants & Safety:
  - Header names keep the case they were received in; recognised fields are
    matched case-insensitively.
  - Entries with an empty name are dropped.
  - ``parse_headers`` never raises for a single malformed header.
"""
from __future__ import annotations

import re
from email.errors import HeaderParseError
from email.headerregistry import HeaderRegistry
from email.utils import getaddresses
from typing import Dict, List, Optional, Tuple, Union

from ..contacts import UNKNOWN_HOST, ContactList
from ..utils.logging import get_logger

HeaderValue = Union[str, ContactList]

CONTACT_HEADERS = frozenset({"to", "from", "cc", "bcc"})

_LOGGER = get_logger("mailaccess.headers")
_ROUTE_RE = re.compile(r"<\s*(@[^:<>]+?)\s*:")
_UNSTRUCTURED = HeaderRegistry(use_default_map=False)


class HeaderMap(Dict[str, HeaderValue]):
    """Dictionary of decoded headers keyed by the name as received."""

    def lookup(self, name: str, default: Optional[HeaderValue] = None) -> Optional[HeaderValue]:
        """Case-insensitive access to a header value."""

        wanted = name.lower()
        for key, value in self.items():
            if key.lower() == wanted:
                return value
        return default


def unfold_headers(text: str) -> List[Tuple[str, str]]:
    """Split ``text`` into ``(name, raw value)`` pairs in order of appearance.

    Lines starting with a space or tab continue the previous header. A later
    header with the same name replaces the earlier one but keeps its position.
    """

    headers: Dict[str, str] = {}
    last: Optional[str] = None
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if line[:1] in (" ", "\t"):
            if last is not None:
                headers[last] += line
            continue
        name, _, value = line.partition(":")
        headers[name] = value
        last = name
    return [(name, value) for name, value in headers.items() if name.strip()]


def decode_mime_text(value: str) -> str:
    """Decode MIME encoded-words in ``value`` into plain text.

    Adjacent encoded-words may use different charsets; whitespace between them
    is dropped. Unknown charsets are read as ASCII with the undecodable bytes
    replaced. Text outside encoded-words is kept verbatim.
    """

    return str(_UNSTRUCTURED("unstructured", value))


def parse_contacts(value: str) -> ContactList:
    """Parse an address-list header into a :class:`ContactList`.

    What:
      Produce one contact per address, in source order.

    Why:
      Callers need structured mailbox/host/name access instead of a raw
      address string.

    How:
      :func:`email.utils.getaddresses` splits the raw list. Display names are
      decoded afterwards so encoded commas cannot split an address. Source
      routes, which the standard parser drops, are recovered by a regular
      expression when their count matches the address count. Addresses
      without ``@`` get :data:`~mailaccess.contacts.UNKNOWN_HOST`.

    Args:
      value: Raw (unfolded) header value.

    Returns:
      The parsed contacts, possibly empty.
    """

    contacts = ContactList()
    raw = value.strip()
    routes = _ROUTE_RE.findall(raw)
    if routes:
        raw = _ROUTE_RE.sub("<", raw)
    parsed = [(name, address) for name, address in getaddresses([raw]) if name or address]
    if len(routes) != len(parsed):
        routes = []
    for index, (name, address) in enumerate(parsed):
        mailbox, sep, host = address.rpartition("@")
        if not sep:
            mailbox, host = address, UNKNOWN_HOST
        contacts.add_contact(
            mailbox=mailbox,
            host=host or UNKNOWN_HOST,
            name=decode_mime_text(name).strip() if name else None,
            adl=routes[index] if routes else None,
        )
    return contacts


def parse_headers(raw: Union[bytes, str]) -> HeaderMap:
    """Parse a raw header block into a :class:`HeaderMap`.

    What:
      Unfold, split and decode every header of ``raw``.

    Why:
      This is the single entry point used by
      :meth:`mailaccess.imap.session.MailboxSession.get_headers`.

    How:
      Bytes are decoded as UTF-8 with replacement. Each header is decoded by
      name: ``subject`` through :func:`decode_mime_text`, address headers
      through :func:`parse_contacts`, others through
      :func:`decode_mime_text`. Failures keep the raw trimmed text.

    Args:
      raw: Header block bytes or text.

    Returns:
      The decoded header map.
    """

    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
    headers = HeaderMap()
    for name, value in unfold_headers(text):
        lowered = name.strip().lower()
        try:
            if lowered in CONTACT_HEADERS:
                headers[name] = parse_contacts(value)
            else:
                headers[name] = decode_mime_text(value).strip()
        except (HeaderParseError, UnicodeError, ValueError, LookupError) as exc:
            _LOGGER.warning("header decode failed", header=name, error=str(exc))
            headers[name] = value.strip()
    return headers


__all__ = [
    "CONTACT_HEADERS",
    "HeaderMap",
    "HeaderValue",
    "decode_mime_text",
    "parse_contacts",
    "parse_headers",
    "unfold_headers",
]
