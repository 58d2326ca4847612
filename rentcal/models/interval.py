"""
Whole-day date ranges and the overlap predicate.

Every range is closed on both ends: [2024-06-01, 2024-06-03] occupies the
1st, 2nd and 3rd. Bounds are plain ``datetime.date`` values, so there is no
time-of-day or timezone to shift a day boundary.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from rentcal.exceptions import InvalidDateRangeError

ONE_DAY = timedelta(days=1)


def as_date(x) -> date:
    """Coerce any date-like to a naive date (supports 'YYYY-MM-DD' or ISO with T)."""
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    if isinstance(x, str):
        base = x.split("T", 1)[0].strip()
        return date.fromisoformat(base)
    raise ValueError(f"Unsupported date: {x!r}")


@dataclass(frozen=True)
class DateRange:
    """Closed interval of calendar days."""

    start: date
    end: date

    def __post_init__(self):
        if isinstance(self.start, datetime) or not isinstance(self.start, date):
            raise InvalidDateRangeError(f"Error: range start must be a date, got {self.start!r}")
        if isinstance(self.end, datetime) or not isinstance(self.end, date):
            raise InvalidDateRangeError(f"Error: range end must be a date, got {self.end!r}")
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"Error: range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def parse(cls, start, end=None) -> "DateRange":
        """Build a range from date-likes; a missing end means a single day."""
        d1 = as_date(start)
        d2 = as_date(end) if end is not None else d1
        return cls(d1, d2)

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(day, day)

    @property
    def is_single_day(self) -> bool:
        return self.start == self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


def contains(r: DateRange, day: date) -> bool:
    """True if ``day`` falls inside the closed range."""
    return r.start <= day <= r.end


def overlaps(a: DateRange, b: DateRange) -> bool:
    """
    True iff the two closed ranges share at least one day.

    Either a's start lies in b, or a's end lies in b, or a swallows b whole.
    Touching ranges overlap; 06-01..06-05 and 06-06..06-08 do not.
    """
    return contains(b, a.start) or contains(b, a.end) or (a.start <= b.start and a.end >= b.end)


def length_in_days(r: DateRange) -> int:
    """
    Billable length: whole days between start and end, never below 1.
    A same-day range counts as 1 day; 06-01..06-03 counts as 2.
    """
    return max(1, (r.end - r.start).days)


def clip(r: DateRange, window_start: date, window_end: date) -> Optional[DateRange]:
    """Intersection of ``r`` with the window, or None when they are disjoint."""
    start = max(r.start, window_start)
    end = min(r.end, window_end)
    if start > end:
        return None
    return DateRange(start, end)


def month_window(year: int, month: int) -> DateRange:
    """First to last day of the given month."""
    last = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last))


def iter_days(r: DateRange) -> Iterator[date]:
    day = r.start
    while day <= r.end:
        yield day
        day += ONE_DAY
