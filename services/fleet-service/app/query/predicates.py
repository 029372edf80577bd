"""
Tagged predicates understood by the storage layer.

The query builder never hands raw field names or filter objects to
storage. It produces these immutable predicates instead, each naming a
field that has already been checked against an entity allow-list.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Equals:
    """Exact match on a single field."""

    field: str
    value: Any

    def matches(self, candidate: Any) -> bool:
        return candidate == self.value


@dataclass(frozen=True)
class Range:
    """
    Bounded range on a single field.

    ``gte`` and ``lte`` are inclusive, ``lt`` is exclusive. Any bound may
    be omitted; a range without bounds matches every non-null value.
    """

    field: str
    gte: Optional[datetime] = None
    lte: Optional[datetime] = None
    lt: Optional[datetime] = None

    def matches(self, candidate: Optional[datetime]) -> bool:
        if candidate is None:
            return False
        if self.gte is not None and candidate < self.gte:
            return False
        if self.lte is not None and candidate > self.lte:
            return False
        if self.lt is not None and candidate >= self.lt:
            return False
        return True


@dataclass(frozen=True)
class SubstringAnyOf:
    """Case-insensitive substring search OR-combined across several fields."""

    fields: tuple[str, ...]
    term: str

    def matches(self, *candidates: Optional[str]) -> bool:
        needle = self.term.lower()
        return any(value is not None and needle in value.lower() for value in candidates)


Predicate = Union[Equals, Range, SubstringAnyOf]


@dataclass(frozen=True)
class DateWindow:
    """Optional inclusive reporting period."""

    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @property
    def is_bounded(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    def to_range(self, field: str) -> Optional[Range]:
        """Predicate for this window on ``field``, or None for all time."""
        if not self.is_bounded:
            return None
        return Range(field=field, gte=self.date_from, lte=self.date_to)

    def contains(self, value: Optional[datetime]) -> bool:
        if not self.is_bounded:
            return value is not None
        return Range(field="", gte=self.date_from, lte=self.date_to).matches(value)


def expiring_within(field: str, now: datetime, days: int) -> Range:
    """Values between ``now`` and ``now + days`` inclusive."""
    return Range(field=field, gte=now, lte=now + timedelta(days=days))


def expired_before(field: str, now: datetime) -> Range:
    """Values strictly before ``now``."""
    return Range(field=field, lt=now)
