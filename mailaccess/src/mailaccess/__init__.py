"""
Module: mailaccess.__init__

What:
  Aggregate the public surface of the mailaccess IMAP mapping layer: the
  connection facade, the filter value types and the error hierarchy.

Why:
  Applications should only need ``from mailaccess import Connection, Filter``;
  the submodule layout (``imap``, ``config``, ``utils``) can evolve behind it.

Interfaces:
  - Connection / Selection: lazily connected account and mailbox handles.
  - Filter / Criterion / SortOrder: search description.
  - Contact / ContactList: parsed address headers.
  - errors: every exception type, re-exported.
"""

from .connection import Connection, MailDriver, Selection
from .contacts import Contact, ContactList
from .errors import *  # noqa: F401,F403
from .errors import __all__ as _error_names
from .filters import Criterion, Filter, SortOrder

__version__ = "1.0.0"

__all__ = [
    "Connection",
    "Contact",
    "ContactList",
    "Criterion",
    "Filter",
    "MailDriver",
    "Selection",
    "SortOrder",
    *_error_names,
]
