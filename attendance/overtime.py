"""
attendance.overtime — Worked-time and overtime arithmetic.

Every function here is a pure computation over its explicit arguments.
Day classification comes from :mod:`attendance.calendar_policy`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from .calendar_policy import DEFAULT_CALENDAR, REQUIRED_OVERTIME_PER_WORKDAY, CalendarPolicy, DateLike

if TYPE_CHECKING:
    from .stats_parser import ParsedStatsRecord

WORKDAY = "workday"
REST_DAY = "restDay"
DAY_TYPES = {WORKDAY, REST_DAY}


@dataclass(frozen=True)
class OvertimePolicy:
    standard_day_minutes: int = 480
    # Shifts longer than this are assumed to include a lunch break.
    lunch_threshold_minutes: int = 240
    lunch_break_minutes: int = 60
    required_overtime_per_workday: int = REQUIRED_OVERTIME_PER_WORKDAY


DEFAULT_POLICY = OvertimePolicy()


def classify(value: DateLike, calendar: Optional[CalendarPolicy] = None) -> str:
    cal = calendar or DEFAULT_CALENDAR
    return REST_DAY if cal.is_rest_day(value) else WORKDAY


def parse_hhmm(value: str) -> int:
    """``"HH:mm"`` → minutes since midnight.  Raises ``ValueError`` if malformed."""
    t = datetime.strptime(value.strip(), "%H:%M")
    return t.hour * 60 + t.minute


def worked_minutes(start: str, end: str, policy: OvertimePolicy = DEFAULT_POLICY) -> int:
    """Minutes between two same-day times, less lunch for long shifts.

    A misordered pair yields a negative duration, returned as-is.
    """
    raw = parse_hhmm(end) - parse_hhmm(start)
    if raw > policy.lunch_threshold_minutes:
        return raw - policy.lunch_break_minutes
    return raw


def overtime_minutes(worked: int, day_type: str, policy: OvertimePolicy = DEFAULT_POLICY) -> int:
    if day_type == REST_DAY:
        return worked
    return max(0, worked - policy.standard_day_minutes)


def reconcile(stats: "ParsedStatsRecord") -> "ParsedStatsRecord":
    """Return a copy of *stats* with the derived fields filled in.

    ``total_hours = avg_hours × attendance_days``;
    ``correct_avg_hours = total_hours / workdays`` (0 when no workdays);
    ``weekend_work_days = max(0, attendance_days − workdays)``.
    """
    total_hours = stats.avg_hours * stats.attendance_days
    return dataclasses.replace(
        stats,
        total_hours=total_hours,
        correct_avg_hours=total_hours / stats.workdays if stats.workdays > 0 else 0.0,
        weekend_work_days=max(0, stats.attendance_days - stats.workdays),
        is_valid=stats.avg_hours > 0 and stats.attendance_days > 0,
        warnings=list(stats.warnings),
    )
