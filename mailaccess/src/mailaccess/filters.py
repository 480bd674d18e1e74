"""Typed search criteria and the immutable :class:`Filter` value object.

What:
  Enumerate the search criteria mailaccess understands, the value shape each
  one expects, and a small value object bundling an ordered list of
  conditions with ordering and paging hints.

Why:
  Search input is user supplied. Keeping the vocabulary in an enum lets the
  compiler check every key against a fixed table and refuse anything else
  before a single byte reaches the server.

How:
  :class:`Criterion` is a string enum; :data:`CRITERIA` maps each member to a
  :class:`ValueShape` and the IMAP keyword it compiles to. :class:`Filter`
  is a frozen dataclass whose ``where``/``ordered``/``paged`` helpers return
  modified copies.

Interfaces:
  :class:`Criterion`, :class:`ValueShape`, :class:`CriterionSpec`,
  :data:`CRITERIA`, :class:`SortOrder`, :class:`Condition`, :class:`Filter`,
  :func:`resolve_criterion`.

Invariants & Safety:
  - Every :class:`Criterion` member has exactly one entry in :data:`CRITERIA`.
  - A :class:`Filter` never changes after construction; conditions keep their
    insertion order and combine as a logical AND.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .errors import InvalidFilterKeyError


class ValueShape(str, Enum):
    """Kind of value a criterion accepts."""

    FLAG = "flag"
    NONE = "none"
    STRING = "string"
    KEYWORD = "keyword"
    DATE = "date"


class Criterion(str, Enum):
    """Search criteria supported by the filter compiler."""

    ANSWERED = "answered"
    BCC = "bcc"
    BEFORE = "before"
    BODY = "body"
    CC = "cc"
    DELETED = "deleted"
    FLAGGED = "flagged"
    FROM = "from"
    KEYWORD = "keyword"
    NEW = "new"
    NOT_KEYWORD = "not_keyword"
    OLD = "old"
    ON = "on"
    RECENT = "recent"
    SEEN = "seen"
    SINCE = "since"
    SUBJECT = "subject"
    TEXT = "text"
    TO = "to"


@dataclass(frozen=True)
class CriterionSpec:
    """Compilation rule for one criterion: value shape plus IMAP keyword."""

    shape: ValueShape
    keyword: str


CRITERIA: Dict[Criterion, CriterionSpec] = {
    Criterion.ANSWERED: CriterionSpec(ValueShape.FLAG, "ANSWERED"),
    Criterion.BCC: CriterionSpec(ValueShape.STRING, "BCC"),
    Criterion.BEFORE: CriterionSpec(ValueShape.DATE, "BEFORE"),
    Criterion.BODY: CriterionSpec(ValueShape.STRING, "BODY"),
    Criterion.CC: CriterionSpec(ValueShape.STRING, "CC"),
    Criterion.DELETED: CriterionSpec(ValueShape.FLAG, "DELETED"),
    Criterion.FLAGGED: CriterionSpec(ValueShape.FLAG, "FLAGGED"),
    Criterion.FROM: CriterionSpec(ValueShape.STRING, "FROM"),
    Criterion.KEYWORD: CriterionSpec(ValueShape.KEYWORD, "KEYWORD"),
    Criterion.NEW: CriterionSpec(ValueShape.NONE, "NEW"),
    Criterion.NOT_KEYWORD: CriterionSpec(ValueShape.KEYWORD, "UNKEYWORD"),
    Criterion.OLD: CriterionSpec(ValueShape.NONE, "OLD"),
    Criterion.ON: CriterionSpec(ValueShape.DATE, "ON"),
    Criterion.RECENT: CriterionSpec(ValueShape.NONE, "RECENT"),
    Criterion.SEEN: CriterionSpec(ValueShape.FLAG, "SEEN"),
    Criterion.SINCE: CriterionSpec(ValueShape.DATE, "SINCE"),
    Criterion.SUBJECT: CriterionSpec(ValueShape.STRING, "SUBJECT"),
    Criterion.TEXT: CriterionSpec(ValueShape.STRING, "TEXT"),
    Criterion.TO: CriterionSpec(ValueShape.STRING, "TO"),
}


def resolve_criterion(key: Union[Criterion, str]) -> Criterion:
    """Map ``key`` (enum member or case-insensitive name) to a :class:`Criterion`.

    Raises:
      InvalidFilterKeyError: If ``key`` names no known criterion.
    """

    if isinstance(key, Criterion):
        return key
    if isinstance(key, str):
        normalised = key.strip().lower()
        try:
            return Criterion(normalised)
        except ValueError:
            pass
        member = Criterion.__members__.get(key.strip().upper())
        if member is not None:
            return member
    raise InvalidFilterKeyError(f"Invalid filter key {key!r}.")


class SortOrder(str, Enum):
    """Arrival ordering applied to search results."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Condition:
    """A single ``(criterion, value)`` pair inside a :class:`Filter`."""

    key: Union[Criterion, str]
    value: Any = None


@dataclass(frozen=True)
class Filter:
    """Ordered search conditions plus optional ordering and paging.

    What:
      Hold the conditions a caller wants to AND together, the arrival order of
      the result, and an optional ``offset``/``limit`` window.

    Why:
      A value object can be built incrementally, shared between callers and
      compiled more than once without surprises.

    How:
      Frozen dataclass; the builder helpers use :func:`dataclasses.replace` to
      return new instances. Keys are not validated here; validation belongs to
      :class:`~mailaccess.imap.search.FilterCompiler` so it can run right
      before a search.

    Attributes:
      conditions: Tuple of :class:`Condition` in insertion order.
      order: Optional arrival order of the result.
      limit: Maximum number of ids to return, ``None`` for no limit.
      offset: Number of ids to skip, ``None`` for none.
    """

    conditions: Tuple[Condition, ...] = field(default_factory=tuple)
    order: Optional[SortOrder] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def where(self, key: Union[Criterion, str], value: Any = None) -> "Filter":
        """Return a copy with ``(key, value)`` appended to the conditions."""

        return replace(self, conditions=self.conditions + (Condition(key, value),))

    def ordered(self, order: Union[SortOrder, str]) -> "Filter":
        if isinstance(order, str):
            order = order.lower()
        return replace(self, order=SortOrder(order))

    def paged(self, limit: Optional[int] = None, offset: Optional[int] = None) -> "Filter":
        return replace(self, limit=limit, offset=offset)

    def __len__(self) -> int:
        return len(self.conditions)

    def as_pairs(self) -> Tuple[Tuple[Union[Criterion, str], Any], ...]:
        """Return the conditions as plain ``(key, value)`` tuples."""

        return tuple((condition.key, condition.value) for condition in self.conditions)


__all__ = [
    "Criterion",
    "CriterionSpec",
    "CRITERIA",
    "Condition",
    "Filter",
    "SortOrder",
    "ValueShape",
    "resolve_criterion",
]
