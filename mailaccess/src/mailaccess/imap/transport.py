"""Transport boundary between the session driver and an IMAP library.

What:
  Define the :class:`MailboxTransport` protocol the session driver depends on
  and :class:`ImapClientTransport`, its implementation on top of the
  third-party ``imapclient`` library.

Why:
  The driver's logic (filter compilation, selection tracking, header and body
  decoding) is independent of how protocol commands reach the server. A narrow
  protocol lets tests substitute an in-memory fake and keeps ``imapclient``
  quirks (bytes vs. str, response keys, missing ``SORT``) in one place.

How:
  :class:`ImapClientTransport` opens an ``IMAPClient`` in UID mode, disables
  its folder-name encoding so the driver sees raw modified UTF-7 names, and
  converts every ``imapclient`` or socket error into
  :class:`~mailaccess.errors.TransportError` carrying the server diagnostic.

Interfaces:
  :class:`ServerSpec`, :class:`MailboxTransport`, :class:`ImapClientTransport`,
  :func:`search_arguments`.

Invariants & Safety:
  - Message identifiers are always UIDs.
  - Body and header fetches use ``BODY.PEEK`` and never set ``\\Seen``.
  - No method retries; one failure produces one ``TransportError``.
"""
from __future__ import annotations

import contextlib
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Protocol, Sequence, Union, runtime_checkable

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError
from imapclient.imapclient import _literal

from ..errors import TransportError
from .structure import ROOT_PART_ID


@dataclass(frozen=True)
class ServerSpec:
    """Where and how to reach the IMAP server."""

    host: str
    port: int = 993
    ssl: bool = True
    timeout: Optional[float] = None

    @property
    def name(self) -> str:
        scheme = "imaps" if self.ssl else "imap"
        return f"{scheme}://{self.host}:{self.port}"


@runtime_checkable
class MailboxTransport(Protocol):
    """Capability the session driver needs from a protocol engine."""

    def open(self, server: ServerSpec, username: str, password: str) -> None: ...

    def close(self) -> None: ...

    def list_folders(self, prefix: str = "", pattern: str = "*") -> List[str]: ...

    def create_folder(self, name: str) -> None: ...

    def rename_folder(self, old: str, new: str) -> None: ...

    def delete_folder(self, name: str) -> None: ...

    def reopen(self, name: str) -> None: ...

    def expunge(self) -> None: ...

    def sort_by_arrival(self, predicate: str, charset: str = "UTF-8") -> List[int]: ...

    def fetch_header_block(self, uid: int) -> bytes: ...

    def fetch_structure(self, uid: int) -> Sequence[Any]: ...

    def fetch_body(self, uid: int, part_id: str, peek: bool = True) -> bytes: ...


def _ascii(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode("ascii")


_TOKEN_RE = re.compile(r'"((?:[^"\\]|\\.)*)"|(\S+)')
_ESCAPE_RE = re.compile(r"\\(.)")
_ATOM_SPECIALS = frozenset('(){%*]')


def search_arguments(predicate: str, charset: str = "UTF-8") -> List[Union[str, bytes]]:
    """Split a compiled predicate into separate ``imapclient`` search arguments.

    What:
      Turn ``SUBJECT "café" UNSEEN`` into ``["SUBJECT", "café", "UNSEEN"]``.

    Why:
      ``imapclient`` sends a criteria string as one argument, and any 8-bit
      argument as a literal, so a single non-ASCII value would wrap the whole
      key list into one literal. As separate arguments each value is quoted or
      sent as its own literal.

    How:
      Quoted strings are unescaped and passed as values. ``imapclient`` quotes
      values containing spaces, quotes or backslashes itself; ASCII values
      that are not valid atoms for another reason are forced into a literal.
      An empty predicate means ``ALL``.
    """

    arguments: List[Union[str, bytes]] = []
    for match in _TOKEN_RE.finditer(predicate):
        quoted, atom = match.groups()
        if atom is not None:
            arguments.append(atom)
            continue
        value = _ESCAPE_RE.sub(r"\1", quoted)
        if value and not set(value) & set(' "\\') and set(value) & _ATOM_SPECIALS:
            arguments.append(_literal(value.encode(charset)))
        else:
            arguments.append(value)
    return arguments or ["ALL"]


class ImapClientTransport:
    """:class:`MailboxTransport` backed by :class:`imapclient.IMAPClient`.

    What:
      Issue the handful of IMAP commands the driver needs and normalise the
      responses to plain Python types.

    Why:
      ``imapclient`` returns a mix of ``bytes`` and ``str`` and keys fetch
      responses by the non-peek section name; the driver should not depend on
      those details.

    How:
      Lazily created client stored on the instance; :meth:`_guard` converts
      library and socket exceptions to :class:`TransportError`.
    """

    def __init__(self) -> None:
        self._client: Optional[IMAPClient] = None

    @property
    def client(self) -> IMAPClient:
        if self._client is None:
            raise TransportError("IMAP client not connected")
        return self._client

    @contextlib.contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except TransportError:
            raise
        except (IMAPClientError, OSError) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

    def open(self, server: ServerSpec, username: str, password: str) -> None:
        with self._guard():
            client = IMAPClient(server.host, port=server.port, ssl=server.ssl, timeout=server.timeout)
            try:
                client.folder_encode = False
                client.login(username, password)
            except (IMAPClientError, OSError):
                with contextlib.suppress(IMAPClientError, OSError):
                    client.shutdown()
                raise
        self._client = client

    def close(self) -> None:
        if self._client is None:
            return
        try:
            with self._guard():
                self._client.logout()
        finally:
            self._client = None

    def list_folders(self, prefix: str = "", pattern: str = "*") -> List[str]:
        with self._guard():
            listing = self.client.list_folders(directory=prefix, pattern=pattern)
        names = []
        for _flags, _delimiter, name in listing:
            if isinstance(name, bytes):
                name = name.decode("latin-1")
            names.append(str(name))
        return names

    def create_folder(self, name: str) -> None:
        with self._guard():
            self.client.create_folder(_ascii(name))

    def rename_folder(self, old: str, new: str) -> None:
        with self._guard():
            self.client.rename_folder(_ascii(old), _ascii(new))

    def delete_folder(self, name: str) -> None:
        with self._guard():
            self.client.delete_folder(_ascii(name))

    def reopen(self, name: str) -> None:
        with self._guard():
            self.client.select_folder(_ascii(name))

    def expunge(self) -> None:
        with self._guard():
            self.client.expunge()

    def sort_by_arrival(self, predicate: str, charset: str = "UTF-8") -> List[int]:
        """UIDs matching ``predicate`` in arrival order.

        Servers without the ``SORT`` extension get a plain ``SEARCH``; UIDs
        are assigned in arrival order, so sorting them ascending is equivalent.
        """

        criteria = search_arguments(predicate, charset)
        with self._guard():
            if self.client.has_capability("SORT"):
                return list(self.client.sort(["ARRIVAL"], criteria, charset))
            return sorted(self.client.search(criteria, charset))

    def _fetch_one(self, uid: int, item: str, key: bytes) -> Any:
        with self._guard():
            response = self.client.fetch([uid], [item])
        data = response.get(uid)
        if data is None or key not in data:
            raise TransportError(f"no {key.decode()} returned for UID {uid}")
        return data[key]

    def fetch_header_block(self, uid: int) -> bytes:
        return self._fetch_one(uid, "BODY.PEEK[HEADER]", b"BODY[HEADER]") or b""

    def fetch_structure(self, uid: int) -> Sequence[Any]:
        return self._fetch_one(uid, "BODYSTRUCTURE", b"BODYSTRUCTURE")

    def fetch_body(self, uid: int, part_id: str, peek: bool = True) -> bytes:
        section = "TEXT" if part_id == ROOT_PART_ID else part_id
        verb = "BODY.PEEK" if peek else "BODY"
        return self._fetch_one(uid, f"{verb}[{section}]", f"BODY[{section}]".encode("ascii")) or b""


__all__ = ["ImapClientTransport", "MailboxTransport", "ServerSpec", "search_arguments"]
