"""Exception hierarchy shared by every mailaccess layer.

What:
  Define the typed errors raised by the filter compiler, the mailbox-name
  codec, the IMAP session driver, the transport boundary, and the
  :class:`~mailaccess.connection.Connection` facade.

Why:
  Callers must be able to tell caller mistakes (bad filters, unknown mailbox
  names, incompatible drivers) apart from server-reported failures without
  string matching. Validation errors are always raised before any network
  traffic, transport errors only after.

How:
  A single :class:`MailAccessError` root with two branches: validation errors
  (which also inherit the matching builtin such as :class:`ValueError`) and
  :class:`DriverError` subclasses that carry the failing operation plus the
  verbatim server diagnostic.

Interfaces:
  ``MailAccessError``, ``MailConnectionError``, ``TransportError``,
  ``DriverError``, ``MailboxListError``, ``MailboxSwitchError``,
  ``SearchError``, ``FetchError``, ``InvalidFilterError``,
  ``InvalidFilterKeyError``, ``InvalidFilterValueError``,
  ``InvalidMailboxNameError``, ``InvalidDriverError``, ``EncodingError``.

Invariants & Safety:
  - Diagnostics are surfaced as received; nothing here retries.
  - Credentials never appear in error messages.
"""
from __future__ import annotations

from typing import Optional


class MailAccessError(Exception):
    """Root of every error raised by mailaccess."""


class MailConnectionError(MailAccessError):
    """Raised when a session cannot be established with the server."""


class TransportError(MailAccessError):
    """Failure reported by a :class:`~mailaccess.imap.transport.MailboxTransport`.

    The message is the server (or socket) diagnostic. The session layer
    re-raises it as one of the :class:`DriverError` subclasses so callers do
    not have to know about the transport boundary.
    """


class DriverError(MailAccessError):
    """Server-reported failure of a driver operation.

    What:
      Bundle the failing operation name with the diagnostic text returned by
      the transport.

    Why:
      Mailbox management errors are only actionable when the operator can see
      which command failed and what the server said about it.

    How:
      Store both parts as attributes and build a readable message from them.

    Attributes:
      operation: Human-readable description of the failed operation.
      diagnostic: Verbatim transport diagnostic, possibly empty.
    """

    def __init__(self, operation: str, diagnostic: Optional[str] = None) -> None:
        self.operation = operation
        self.diagnostic = diagnostic or ""
        message = operation if not self.diagnostic else f"{operation}: {self.diagnostic}"
        super().__init__(message)


class MailboxListError(DriverError):
    """Listing mailboxes failed."""


class MailboxSwitchError(DriverError):
    """Selecting another mailbox (or flushing the previous one) failed."""


class SearchError(DriverError):
    """A sorted UID search failed or no mailbox was selected."""


class FetchError(DriverError):
    """Fetching headers, structure or body parts failed."""


class InvalidFilterError(MailAccessError, ValueError):
    """Base class for filter validation problems."""


class InvalidFilterKeyError(InvalidFilterError):
    """The filter key is not a known search criterion."""


class InvalidFilterValueError(InvalidFilterError):
    """The filter value does not match the shape its criterion expects."""


class InvalidMailboxNameError(MailAccessError, LookupError):
    """A mailbox name was not found in the connection's mailbox cache."""


class InvalidDriverError(MailAccessError, TypeError):
    """An object passed as driver does not implement the driver protocol."""


class EncodingError(MailAccessError, ValueError):
    """A modified UTF-7 mailbox name is malformed."""


__all__ = [
    "MailAccessError",
    "MailConnectionError",
    "TransportError",
    "DriverError",
    "MailboxListError",
    "MailboxSwitchError",
    "SearchError",
    "FetchError",
    "InvalidFilterError",
    "InvalidFilterKeyError",
    "InvalidFilterValueError",
    "InvalidMailboxNameError",
    "InvalidDriverError",
    "EncodingError",
]
