"""Compile typed filter conditions into an IMAP search predicate.

What:
  Validate ``(criterion, value)`` pairs against the criterion table and render
  them as the space-separated search key string that IMAP ``SORT``/``SEARCH``
  commands accept.

Why:
  IMAP search syntax is positional and picky about argument formats. Doing the
  translation in one table-driven place keeps user values inside their
  quoted string (quotes, CR, LF and NUL are stripped, backslashes escaped)
  and makes tricky date handling unit-testable without a server.

How:
  :class:`FilterCompiler` looks each key up in
  :data:`mailaccess.filters.CRITERIA` and dispatches on the
  :class:`~mailaccess.filters.ValueShape`: flags render as ``KEY``/``UNKEY``,
  string shapes as ``KEY "value"``, dates as ``KEY "DD-Mon-YYYY"`` and
  value-less criteria as the bare keyword. Rendered clauses are joined with a
  single space, which IMAP reads as logical AND.

Interfaces:
  :class:`FilterCompiler`, :func:`parse_date`, :func:`format_imap_date`.

Invariants & Safety:
  - ``check_filter`` never performs I/O, so callers can validate before a
    network round-trip.
  - A date string that cannot be parsed compiles to *today*. ``check_filter``
    rejects such strings; ``compile`` keeps the fallback for callers that skip
    validation.
"""
from __future__ import annotations

import time
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from ..errors import InvalidFilterKeyError, InvalidFilterValueError
from ..filters import CRITERIA, Criterion, CriterionSpec, ValueShape, resolve_criterion

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_DATE_FORMATS = ("%d %b %Y", "%d-%b-%Y", "%Y-%m-%d", "%d.%m.%Y", "%Y/%m/%d")
_UNQUOTABLE = {ord(char): None for char in '"\r\n\0'}

DateValue = Union[date, datetime, int, str]


def format_imap_date(value: date) -> str:
    """Render ``value`` as IMAP ``date-text`` (``05-Mar-2024``).

    Month names are fixed English abbreviations, independent of the locale.
    """

    return f"{value.day:02d}-{_MONTHS[value.month - 1]}-{value.year:04d}"


def parse_date(text: str) -> Optional[datetime]:
    """Parse a human or RFC formatted date string; ``None`` when unparseable."""

    candidate = text.strip()
    if not candidate:
        return None
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt)
        except ValueError:
            continue
    try:
        return parsedate_to_datetime(candidate)
    except (TypeError, ValueError, IndexError):
        return None


class FilterCompiler:
    """Validate and compile filter conditions into IMAP search keys.

    What:
      Owns the criterion table lookups and the per-shape rendering rules.

    Why:
      The session driver needs both an up-front validator (so bad input fails
      before I/O) and a compiler; keeping them together guarantees they agree
      on the table.

    How:
      Stateless apart from the injectable ``clock`` used for the unparseable
      date fallback, which keeps that quirk testable.

    Args:
      clock: Callable returning the current epoch seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    @staticmethod
    def lookup(key: Union[Criterion, str]) -> Tuple[Criterion, CriterionSpec]:
        criterion = resolve_criterion(key)
        spec = CRITERIA.get(criterion)
        if spec is None:
            raise InvalidFilterKeyError(f"Invalid filter key {key!r}.")
        return criterion, spec

    def check_filter(self, key: Union[Criterion, str], value: Any = None) -> None:
        """Validate that ``value`` matches the shape required by ``key``.

        What:
          Enforce the criterion table without compiling anything.

        Why:
          Callers (and :class:`~mailaccess.connection.Selection`) validate
          every condition before talking to the server so that validation and
          transport failures are never mixed.

        How:
          Resolve the key, then apply the shape rule. ``bool`` is rejected for
          date criteria even though it subclasses ``int``.

        Args:
          key: Criterion member or name.
          value: Candidate value.

        Raises:
          InvalidFilterKeyError: Unknown key.
          InvalidFilterValueError: Value shape mismatch.
        """

        criterion, spec = self.lookup(key)
        name = criterion.name
        shape = spec.shape
        if shape in (ValueShape.STRING, ValueShape.KEYWORD):
            if not isinstance(value, str):
                raise InvalidFilterValueError(
                    f"Invalid value type for filter '{name}', expected string, got {type(value).__name__}."
                )
        elif shape is ValueShape.DATE:
            if isinstance(value, bool) or not (
                isinstance(value, (date, int)) or (isinstance(value, str) and parse_date(value) is not None)
            ):
                raise InvalidFilterValueError(
                    f"Invalid value type for filter '{name}', expected date, timestamp, or textual "
                    f"representation of date, got {type(value).__name__}."
                )
            if isinstance(value, int):
                _epoch_date(value)
        elif shape is ValueShape.FLAG:
            if not isinstance(value, bool):
                raise InvalidFilterValueError(
                    f"Invalid value type for filter '{name}', expected bool, got {type(value).__name__}."
                )
        elif value is not None:
            raise InvalidFilterValueError(f"Cannot assign value to filter '{name}'.")

    def check_all(self, conditions: Iterable[Tuple[Union[Criterion, str], Any]]) -> None:
        for key, value in conditions:
            self.check_filter(key, value)

    def render(self, key: Union[Criterion, str], value: Any = None) -> str:
        """Render one condition as an IMAP search clause."""

        _, spec = self.lookup(key)
        shape = spec.shape
        if shape in (ValueShape.STRING, ValueShape.KEYWORD):
            return f'{spec.keyword} "{_quote_value(value)}"'
        if shape is ValueShape.DATE:
            return f'{spec.keyword} "{format_imap_date(self.resolve_date(value))}"'
        if shape is ValueShape.FLAG:
            return spec.keyword if bool(value) else f"UN{spec.keyword}"
        return spec.keyword

    def compile(self, conditions: Iterable[Tuple[Union[Criterion, str], Any]]) -> str:
        """Join the rendered clauses of ``conditions`` with single spaces.

        An empty sequence compiles to ``""``.
        """

        return " ".join(self.render(key, value) for key, value in conditions)

    def resolve_date(self, value: Any) -> date:
        """Resolve a date-shaped value to a calendar date.

        ``date``/``datetime`` keep their own calendar day, integers are epoch
        seconds in local time, strings are parsed and fall back to today when
        parsing fails.
        """

        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            parsed = parse_date(value)
            if parsed is not None:
                return parsed.date()
            return datetime.fromtimestamp(self._clock()).date()
        return _epoch_date(int(value))


def _epoch_date(value: int) -> date:
    try:
        return datetime.fromtimestamp(value).date()
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidFilterValueError(f"Timestamp {value} is outside the supported date range.") from exc


def _quote_value(value: Any) -> str:
    # CR and LF would end the command line; NUL is never valid in a quoted string
    text = str(value).translate(_UNQUOTABLE)
    return text.replace("\\", "\\\\")


__all__ = ["DateValue", "FilterCompiler", "format_imap_date", "parse_date"]
