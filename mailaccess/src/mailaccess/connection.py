"""Connection facade and mailbox selection handles.

What:
  Provide :class:`Connection`, the entry point applications hold, and
  :class:`Selection`, a cached handle for one mailbox that runs searches and
  fetches through the connection's driver.

Why:
  Most callers want "give me INBOX and search it" without managing connect
  order, mailbox listing or selection state. The facade connects lazily,
  lists mailboxes once, and hands out the same :class:`Selection` object for
  the lifetime of the connection.

How:
  The driver comes from an explicit ``driver`` argument or from
  ``driver_factory(config)``; anything that does not satisfy the
  :class:`MailDriver` protocol is rejected. :class:`MailboxCache` is a
  two-state (uninitialised/initialised) keyed map owned by the connection.
  :class:`Selection` validates filters through the driver before any I/O,
  switches the driver to its mailbox, then delegates.

Interfaces:
  :class:`MailDriver`, :class:`MailboxCache`, :class:`Connection`,
  :class:`Selection`.

Invariants & Safety:
  - ``connected`` becomes true at most once; mailbox listing happens at most
    once per connection.
  - Lazy initialisation is not locked: one connection must be used from one
    thread at a time.
"""
from __future__ import annotations

from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

from .config.loader import parse_config
from .config.schema import MailAccessConfig
from .errors import InvalidDriverError, InvalidMailboxNameError
from .filters import Criterion, Filter, SortOrder
from .imap.headers import HeaderMap
from .imap.session import MailboxSession
from .imap.structure import MessageStructure


@runtime_checkable
class MailDriver(Protocol):
    """Operations a :class:`Connection` requires from its driver."""

    @property
    def server_name(self) -> str: ...

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def list_mailboxes(self) -> List[str]: ...

    def create_mailbox(self, name: str) -> None: ...

    def rename_mailbox(self, old: str, new: str) -> None: ...

    def delete_mailbox(self, name: str) -> None: ...

    def switch_mailbox(self, name: str) -> None: ...

    def check_filter(self, key: Union[Criterion, str], value: Any = None) -> None: ...

    def build_filters(self, conditions: Iterable[Tuple[Union[Criterion, str], Any]]) -> str: ...

    def search(self, predicate: str) -> List[int]: ...

    def get_headers(self, uid: int) -> HeaderMap: ...

    def get_structure(self, uid: int) -> MessageStructure: ...

    def get_body(self, uid: int, parts: Sequence[Any]) -> str: ...


DriverFactory = Callable[[MailAccessConfig], MailDriver]


class CacheState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


class MailboxCache:
    """Name-keyed map of :class:`Selection` handles populated exactly once."""

    def __init__(self) -> None:
        self.state = CacheState.UNINITIALIZED
        self._items: Dict[str, "Selection"] = {}

    @property
    def initialized(self) -> bool:
        return self.state is CacheState.INITIALIZED

    def populate(self, names: Iterable[str], factory: Callable[[str], "Selection"]) -> None:
        if self.initialized:
            return
        self._items = {name: factory(name) for name in names}
        self.state = CacheState.INITIALIZED

    def get(self, name: str) -> Optional["Selection"]:
        return self._items.get(name)

    def add(self, selection: "Selection") -> None:
        self._items[selection.name] = selection

    def remove(self, name: str) -> Optional["Selection"]:
        return self._items.pop(name, None)

    def snapshot(self) -> Dict[str, "Selection"]:
        return dict(self._items)


class Connection:
    """Lazily connected entry point to one mail account.

    What:
      Hold the configuration and driver, connect on demand, and cache one
      :class:`Selection` per mailbox.

    Why:
      Keeps connect and listing round-trips off the construction path and
      guarantees callers share the same handles.

    How:
      ``connect`` and ``initialize_mailboxes`` are idempotent; every public
      accessor calls the one it needs first.

    Args:
      config: Validated configuration or a mapping validated into one.
      driver: Ready driver instance; when given, ``driver_factory`` is unused.
      driver_factory: Builds a driver from ``config`` when ``driver`` is
        ``None``. Defaults to :meth:`MailboxSession.from_config`.

    Raises:
      InvalidDriverError: If the driver does not implement :class:`MailDriver`.
      ConfigLoadError: If ``config`` is a mapping that fails validation.
    """

    def __init__(
        self,
        config: Union[MailAccessConfig, Mapping[str, Any]],
        driver: Optional[Any] = None,
        *,
        driver_factory: DriverFactory = MailboxSession.from_config,
    ) -> None:
        self._config = config if isinstance(config, MailAccessConfig) else parse_config(config)
        candidate = driver if driver is not None else driver_factory(self._config)
        if not isinstance(candidate, MailDriver):
            raise InvalidDriverError(
                f"Driver must implement the MailDriver protocol, got {type(candidate).__name__}."
            )
        self._driver: MailDriver = candidate
        self._server_name: Optional[str] = None
        self._connected = False
        self._mailboxes = MailboxCache()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def config(self) -> MailAccessConfig:
        return self._config

    @property
    def driver(self) -> MailDriver:
        return self._driver

    @property
    def server_name(self) -> Optional[str]:
        return self._server_name

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def mailboxes_initialized(self) -> bool:
        return self._mailboxes.initialized

    def connect(self) -> "Connection":
        if not self._connected:
            self._driver.connect()
            self._server_name = self._driver.server_name
            self._connected = True
        return self

    def initialize_mailboxes(self) -> "Connection":
        if not self._mailboxes.initialized:
            names = self.connect()._driver.list_mailboxes()
            self._mailboxes.populate(names, lambda name: Selection(self, name))
        return self

    @property
    def mailboxes(self) -> Dict[str, "Selection"]:
        return self.initialize_mailboxes()._mailboxes.snapshot()

    def get_mailbox(self, name: Optional[str] = None) -> "Selection":
        """Return the cached :class:`Selection` for ``name``.

        Defaults to the configured ``default_mailbox``.

        Raises:
          InvalidMailboxNameError: If the server listed no such mailbox.
        """

        name = name if name is not None else self._config.default_mailbox
        selection = self.initialize_mailboxes()._mailboxes.get(name)
        if selection is None:
            raise InvalidMailboxNameError(f"Mailbox '{name}' not found.")
        return selection

    def create_mailbox(self, name: str) -> "Selection":
        self.initialize_mailboxes()._driver.create_mailbox(name)
        selection = Selection(self, name)
        self._mailboxes.add(selection)
        return selection

    def rename_mailbox(self, old: str, new: str) -> "Selection":
        self.get_mailbox(old)
        self._driver.rename_mailbox(old, new)
        self._mailboxes.remove(old)
        selection = Selection(self, new)
        self._mailboxes.add(selection)
        return selection

    def delete_mailbox(self, name: str) -> None:
        self.get_mailbox(name)
        self._driver.delete_mailbox(name)
        self._mailboxes.remove(name)

    def close(self) -> None:
        if self._connected:
            self._driver.close()
            self._connected = False


class Selection:
    """Handle for one mailbox of a :class:`Connection`.

    Every operation first switches the driver to this mailbox; the driver
    skips the switch when the mailbox is already selected.
    """

    def __init__(self, connection: Connection, name: str) -> None:
        self._connection = connection
        self.name = name

    def __repr__(self) -> str:
        return f"Selection({self.name!r})"

    @property
    def connection(self) -> Connection:
        return self._connection

    def _driver(self) -> MailDriver:
        return self._connection.connect().driver

    def where(self, key: Union[Criterion, str], value: Any = None) -> Filter:
        """Start a validated :class:`Filter` with one condition."""

        self._connection.driver.check_filter(key, value)
        return Filter().where(key, value)

    def search(self, query: Optional[Filter] = None) -> List[int]:
        """Return matching UIDs in arrival order, honouring order and paging.

        All conditions are validated before any server round-trip.
        """

        query = query if query is not None else Filter()
        driver = self._connection.driver
        for key, value in query.as_pairs():
            driver.check_filter(key, value)
        predicate = driver.build_filters(query.as_pairs())
        driver = self._driver()
        driver.switch_mailbox(self.name)
        uids = driver.search(predicate)
        if query.order is SortOrder.DESC:
            uids = list(reversed(uids))
        start = max(query.offset or 0, 0)
        end = start + query.limit if query.limit is not None and query.limit >= 0 else None
        return uids[start:end]

    def headers(self, uid: int) -> HeaderMap:
        driver = self._driver()
        driver.switch_mailbox(self.name)
        return driver.get_headers(uid)

    def structure(self, uid: int) -> MessageStructure:
        driver = self._driver()
        driver.switch_mailbox(self.name)
        return driver.get_structure(uid)

    def body(self, uid: int, parts: Optional[Sequence[Any]] = None) -> str:
        """Decoded body of ``uid``; defaults to the structure's text parts."""

        driver = self._driver()
        driver.switch_mailbox(self.name)
        if parts is None:
            parts = driver.get_structure(uid).text_parts()
        return driver.get_body(uid, parts)


__all__ = ["CacheState", "Connection", "DriverFactory", "MailDriver", "MailboxCache", "Selection"]
