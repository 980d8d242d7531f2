"""
attendance.calendar_policy — Statutory holidays and shifted workdays.

The tables below encode the mainland-China public holiday schedule
published by the State Council for 2024–2026.  Holidays are rest days
even when they fall on a weekday; shifted workdays ("调休") are weekend
dates designated as working days to compensate for a holiday elsewhere.
Dates outside the tabulated range fall back to the plain weekend rule.

Precedence when classifying a date::

    holiday  >  shifted workday  >  Saturday/Sunday
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import FrozenSet, Iterable, Iterator, List, Tuple, Union

DateLike = Union[date, str]

REQUIRED_OVERTIME_PER_WORKDAY = 120


def _span(start: str, end: str) -> List[date]:
    d0 = date.fromisoformat(start)
    d1 = date.fromisoformat(end)
    return [d0 + timedelta(days=i) for i in range((d1 - d0).days + 1)]


def _dates(*items: Union[str, Tuple[str, str]]) -> FrozenSet[date]:
    out: List[date] = []
    for item in items:
        if isinstance(item, tuple):
            out.extend(_span(*item))
        else:
            out.append(date.fromisoformat(item))
    return frozenset(out)


STATUTORY_HOLIDAYS: FrozenSet[date] = _dates(
    # 2024
    "2024-01-01",
    ("2024-02-10", "2024-02-17"),  # Spring Festival
    ("2024-04-04", "2024-04-06"),  # Qingming
    ("2024-05-01", "2024-05-05"),  # Labour Day
    "2024-06-10",                  # Dragon Boat
    ("2024-09-15", "2024-09-17"),  # Mid-Autumn
    ("2024-10-01", "2024-10-07"),  # National Day
    # 2025
    "2025-01-01",
    ("2025-01-28", "2025-02-04"),
    ("2025-04-04", "2025-04-06"),
    ("2025-05-01", "2025-05-05"),
    ("2025-05-31", "2025-06-02"),
    ("2025-10-01", "2025-10-08"),  # National Day + Mid-Autumn
    # 2026
    ("2026-01-01", "2026-01-03"),
    ("2026-02-15", "2026-02-23"),
    ("2026-04-04", "2026-04-06"),
    ("2026-05-01", "2026-05-05"),
    ("2026-06-19", "2026-06-21"),
    ("2026-09-25", "2026-09-27"),
    ("2026-10-01", "2026-10-07"),
)

SHIFTED_WORKDAYS: FrozenSet[date] = _dates(
    # 2024
    "2024-02-04", "2024-02-18", "2024-04-07", "2024-04-28",
    "2024-05-11", "2024-09-14", "2024-09-29", "2024-10-12",
    # 2025
    "2025-01-26", "2025-02-08", "2025-04-27", "2025-09-28", "2025-10-11",
    # 2026
    "2026-01-04", "2026-02-14", "2026-02-28", "2026-05-09",
    "2026-09-20", "2026-10-10",
)


def as_date(value: DateLike) -> date:
    """Coerce an ISO ``YYYY-MM-DD`` string (or a datetime) to a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def month_days(any_date_in_month: DateLike) -> Iterator[date]:
    """Yield every date of the calendar month containing the given date."""
    d = as_date(any_date_in_month)
    last = calendar.monthrange(d.year, d.month)[1]
    for day in range(1, last + 1):
        yield date(d.year, d.month, day)


@dataclass(frozen=True)
class CalendarPolicy:
    """Read-only holiday/shift tables plus the predicates derived from them."""

    holidays: FrozenSet[date] = field(default=STATUTORY_HOLIDAYS)
    shifted_workdays: FrozenSet[date] = field(default=SHIFTED_WORKDAYS)

    @classmethod
    def from_iterables(cls, holidays: Iterable[DateLike] = (),
                       shifted_workdays: Iterable[DateLike] = ()) -> "CalendarPolicy":
        return cls(
            holidays=frozenset(as_date(d) for d in holidays),
            shifted_workdays=frozenset(as_date(d) for d in shifted_workdays),
        )

    def is_holiday(self, value: DateLike) -> bool:
        return as_date(value) in self.holidays

    def is_shifted_workday(self, value: DateLike) -> bool:
        return as_date(value) in self.shifted_workdays

    def is_rest_day(self, value: DateLike) -> bool:
        d = as_date(value)
        if d in self.holidays:
            return True
        if d in self.shifted_workdays:
            return False
        return is_weekend(d)

    def workdays_in_month(self, any_date_in_month: DateLike) -> int:
        return sum(1 for d in month_days(any_date_in_month) if not self.is_rest_day(d))

    def remaining_rest_days_in_month(self, reference_now: DateLike, any_date_in_month: DateLike) -> int:
        """Count weekend days left in the month.

        For the month containing *reference_now* the count runs from that
        date (inclusive) to month end.  Any other month counts all of its
        weekend days.  Both branches use the plain Saturday/Sunday test,
        not :meth:`is_rest_day`.
        """
        today = as_date(reference_now)
        target = as_date(any_date_in_month)
        if (today.year, today.month) != (target.year, target.month):
            return sum(1 for d in month_days(target) if is_weekend(d))
        return sum(1 for d in month_days(target) if d >= today and is_weekend(d))


DEFAULT_CALENDAR = CalendarPolicy()


def is_holiday(value: DateLike) -> bool:
    return DEFAULT_CALENDAR.is_holiday(value)


def is_shifted_workday(value: DateLike) -> bool:
    return DEFAULT_CALENDAR.is_shifted_workday(value)


def is_rest_day(value: DateLike) -> bool:
    return DEFAULT_CALENDAR.is_rest_day(value)


def workdays_in_month(any_date_in_month: DateLike) -> int:
    return DEFAULT_CALENDAR.workdays_in_month(any_date_in_month)


def remaining_rest_days_in_month(reference_now: DateLike, any_date_in_month: DateLike) -> int:
    return DEFAULT_CALENDAR.remaining_rest_days_in_month(reference_now, any_date_in_month)


def required_overtime_minutes(workdays_count: int,
                              per_workday: int = REQUIRED_OVERTIME_PER_WORKDAY) -> int:
    """Required monthly overtime: 2 hours for every workday."""
    return workdays_count * per_workday
