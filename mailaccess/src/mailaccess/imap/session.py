"""Stateful IMAP session driver.

What:
  Own a single :class:`~mailaccess.imap.transport.MailboxTransport` handle and
  implement the mailaccess driver operations on top of it: connecting,
  listing and managing mailboxes, switching the selected mailbox, sorted UID
  searches, and fetching headers, structures and bodies.

Why:
  IMAP is stateful: one mailbox is selected per session and every
  search/fetch applies to it. Tracking the selection here avoids redundant
  expunge/select round-trips and keeps the state machine in one place instead
  of spread over callers.

How:
  The session moves between ``DISCONNECTED``, ``CONNECTED`` and ``SELECTED``.
  Operations that need the server call :meth:`MailboxSession.connect` first
  (it is idempotent). Transport failures are caught once and re-raised as the
  operation-specific :class:`~mailaccess.errors.DriverError` subclass with the
  verbatim diagnostic. Filter validation and compilation are delegated to
  :class:`~mailaccess.imap.search.FilterCompiler`; header and body decoding
  to :mod:`mailaccess.imap.headers` and :mod:`mailaccess.imap.body`.

Interfaces:
  :class:`SessionState`, :class:`MailboxSession`.

Invariants & Safety:
  - All message identifiers are UIDs.
  - ``switch_mailbox`` to the already selected mailbox performs no transport
    call.
  - When a switch fails the session is left connected with no selection.
  - The session is not thread-safe; use one per thread.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, Union

from ..config.schema import MailAccessConfig
from ..errors import (
    DriverError,
    FetchError,
    MailboxListError,
    MailboxSwitchError,
    MailConnectionError,
    SearchError,
    TransportError,
)
from ..filters import Criterion
from ..utils.logging import JsonLogger, get_logger
from .body import BodyChunk, assemble_body
from .headers import HeaderMap, parse_headers
from .mutf7 import decode_mailbox_name, encode_mailbox_name
from .search import FilterCompiler
from .structure import MessagePart, MessageStructure, PartDescriptor, build_structure
from .transport import ImapClientTransport, MailboxTransport, ServerSpec

PartSpec = Union[PartDescriptor, MessagePart, Tuple[Any, ...]]


class SessionState(str, Enum):
    """Lifecycle states of a :class:`MailboxSession`."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    SELECTED = "selected"


class MailboxSession:
    """IMAP driver tracking connection and mailbox selection state.

    Args:
      server: Server location.
      username: Login name.
      password: Login secret.
      transport: Protocol engine; defaults to :class:`ImapClientTransport`.
      prefix: Namespace prefix stripped from listed names and prepended to
        names sent to the server.
      charset: Charset announced for searches.
      compiler: Filter compiler; a default one is created when omitted.
      logger: Structured logger.
    """

    def __init__(
        self,
        server: ServerSpec,
        username: str,
        password: str,
        *,
        transport: Optional[MailboxTransport] = None,
        prefix: str = "",
        charset: str = "UTF-8",
        compiler: Optional[FilterCompiler] = None,
        logger: Optional[JsonLogger] = None,
    ) -> None:
        self._server = server
        self._username = username
        self._password = password
        self._transport: MailboxTransport = transport if transport is not None else ImapClientTransport()
        self._prefix = prefix
        self._charset = charset
        self._compiler = compiler or FilterCompiler()
        self._logger = logger or get_logger("mailaccess.session")
        self._connected = False
        self._current: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        config: MailAccessConfig,
        transport: Optional[MailboxTransport] = None,
    ) -> "MailboxSession":
        """Build a session from a validated :class:`MailAccessConfig`."""

        server = config.server
        return cls(
            server.spec(),
            server.username,
            server.password,
            transport=transport,
            prefix=server.prefix,
            charset=config.search_charset,
            logger=get_logger(f"{config.logging.component}.session", config.logging.level),
        )

    # State ---------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        if not self._connected:
            return SessionState.DISCONNECTED
        if self._current is None:
            return SessionState.CONNECTED
        return SessionState.SELECTED

    @property
    def current_mailbox(self) -> Optional[str]:
        return self._current

    @property
    def server_name(self) -> str:
        return self._server.name

    @property
    def compiler(self) -> FilterCompiler:
        return self._compiler

    def _wire_name(self, name: str) -> str:
        return self._prefix + encode_mailbox_name(name)

    # Connection ----------------------------------------------------------

    def connect(self) -> None:
        """Open the transport once; later calls are no-ops.

        Raises:
          MailConnectionError: If the transport cannot open a session. The
            session stays disconnected.
        """

        if self._connected:
            return
        try:
            self._transport.open(self._server, self._username, self._password)
        except TransportError as exc:
            self._logger.error("connect failed", server=self.server_name, error=str(exc))
            raise MailConnectionError(f"Cannot connect to IMAP server {self.server_name}: {exc}") from exc
        self._connected = True
        self._current = None
        self._logger.info("connected", server=self.server_name, username=self._username)

    def close(self) -> None:
        """Log out and return to ``DISCONNECTED``."""

        if not self._connected:
            return
        try:
            self._transport.close()
        except TransportError as exc:
            self._logger.warning("logout failed", error=str(exc))
        finally:
            self._connected = False
            self._current = None

    # Mailboxes -----------------------------------------------------------

    def list_mailboxes(self) -> List[str]:
        """Return every mailbox name, decoded and without the namespace prefix.

        Raises:
          MailboxListError: If the server refuses the listing.
          EncodingError: If the server returns a malformed name.
        """

        self.connect()
        try:
            raw_names = self._transport.list_folders(self._prefix, "*")
        except TransportError as exc:
            raise MailboxListError("Cannot get mailboxes from server", str(exc)) from exc
        names = []
        for raw in raw_names:
            if self._prefix and raw.startswith(self._prefix):
                raw = raw[len(self._prefix) :]
            names.append(decode_mailbox_name(raw))
        self._logger.debug("listed mailboxes", count=len(names))
        return names

    def create_mailbox(self, name: str) -> None:
        self.connect()
        try:
            self._transport.create_folder(self._wire_name(name))
        except TransportError as exc:
            raise DriverError(f"Cannot create mailbox '{name}'", str(exc)) from exc
        self._logger.info("mailbox created", mailbox=name)

    def rename_mailbox(self, old: str, new: str) -> None:
        self.connect()
        try:
            self._transport.rename_folder(self._wire_name(old), self._wire_name(new))
        except TransportError as exc:
            raise DriverError(f"Cannot rename mailbox from '{old}' to '{new}'", str(exc)) from exc
        if self._current == old:
            self._current = None
        self._logger.info("mailbox renamed", mailbox=old, target=new)

    def delete_mailbox(self, name: str) -> None:
        self.connect()
        try:
            self._transport.delete_folder(self._wire_name(name))
        except TransportError as exc:
            raise DriverError(f"Cannot delete mailbox '{name}'", str(exc)) from exc
        if self._current == name:
            self._current = None
        self._logger.info("mailbox deleted", mailbox=name)

    def flush(self) -> None:
        """Expunge messages flagged for deletion in the selected mailbox."""

        if self._current is None:
            return
        try:
            self._transport.expunge()
        except TransportError as exc:
            raise MailboxSwitchError(f"Cannot flush mailbox '{self._current}'", str(exc)) from exc

    def switch_mailbox(self, name: str) -> None:
        """Make ``name`` the selected mailbox.

        What:
          Flush the previous selection and select ``name`` unless it is
          already selected.

        Why:
          Expunge and select are full server round-trips; skipping them when
          nothing changes is the reason selection state is tracked at all.

        How:
          Compare with the remembered selection, expunge the old mailbox,
          reopen the transport on the new one, then record it. On any failure
          the selection is cleared so the next switch always reselects.

        Raises:
          MailboxSwitchError: If the flush or the select fails.
        """

        if name == self._current:
            return
        self.connect()
        try:
            self.flush()
            self._transport.reopen(self._wire_name(name))
        except MailboxSwitchError:
            self._current = None
            raise
        except TransportError as exc:
            self._current = None
            raise MailboxSwitchError(f"Cannot switch to mailbox '{name}'", str(exc)) from exc
        self._current = name
        self._logger.debug("mailbox selected", mailbox=name)

    # Filters and search --------------------------------------------------

    def check_filter(self, key: Union[Criterion, str], value: Any = None) -> None:
        self._compiler.check_filter(key, value)

    def build_filters(self, conditions: Iterable[Tuple[Union[Criterion, str], Any]]) -> str:
        return self._compiler.compile(conditions)

    def search(self, predicate: str) -> List[int]:
        """Return UIDs matching ``predicate`` in arrival order.

        Raises:
          SearchError: If no mailbox is selected or the server rejects the
            search.
        """

        if self._current is None:
            raise SearchError("Cannot get mails", "no mailbox selected")
        try:
            uids = self._transport.sort_by_arrival(predicate, self._charset)
        except TransportError as exc:
            raise SearchError("Cannot get mails", str(exc)) from exc
        self._logger.debug("search finished", mailbox=self._current, count=len(uids))
        return list(uids)

    def get_mail_ids(self, conditions: Iterable[Tuple[Union[Criterion, str], Any]]) -> List[int]:
        return self.search(self.build_filters(conditions))

    # Fetching ------------------------------------------------------------

    def _require_selection(self, operation: str) -> None:
        if self._current is None:
            raise FetchError(operation, "no mailbox selected")

    def get_headers(self, uid: int) -> HeaderMap:
        """Peek the header block of ``uid`` and parse it."""

        self._require_selection(f"Cannot fetch headers of mail {uid}")
        try:
            raw = self._transport.fetch_header_block(uid)
        except TransportError as exc:
            raise FetchError(f"Cannot fetch headers of mail {uid}", str(exc)) from exc
        return parse_headers(raw)

    def get_structure(self, uid: int) -> MessageStructure:
        self._require_selection(f"Cannot fetch structure of mail {uid}")
        try:
            raw = self._transport.fetch_structure(uid)
        except TransportError as exc:
            raise FetchError(f"Cannot fetch structure of mail {uid}", str(exc)) from exc
        return build_structure(uid, raw)

    def get_body(self, uid: int, parts: Sequence[PartSpec]) -> str:
        """Peek every requested part of ``uid`` and assemble the decoded body.

        Args:
          uid: Message UID.
          parts: :class:`PartDescriptor`, :class:`MessagePart` or
            ``(part_id, encoding[, charset])`` tuples.

        Returns:
          Decoded parts joined by a blank line.
        """

        self._require_selection(f"Cannot fetch body of mail {uid}")
        chunks = []
        for part in parts:
            descriptor = _as_descriptor(part)
            try:
                data = self._transport.fetch_body(uid, descriptor.part_id, peek=True)
            except TransportError as exc:
                raise FetchError(f"Cannot fetch part {descriptor.part_id} of mail {uid}", str(exc)) from exc
            chunks.append(BodyChunk(data, descriptor.encoding, descriptor.charset))
        return assemble_body(chunks)


def _as_descriptor(part: PartSpec) -> PartDescriptor:
    if isinstance(part, MessagePart):
        return part.descriptor
    if isinstance(part, PartDescriptor):
        return part
    part_id, *rest = part
    return PartDescriptor(str(part_id), *rest)


SessionFactory = Callable[[MailAccessConfig], MailboxSession]

__all__ = ["MailboxSession", "SessionFactory", "SessionState"]
