"""
attendance.summary — Month-level progress toward the required overtime.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from .calendar_policy import DEFAULT_CALENDAR, CalendarPolicy, DateLike, required_overtime_minutes
from .overtime import DEFAULT_POLICY, OvertimePolicy
from .records import TimeRecord, filter_month_records


@dataclass(frozen=True)
class MonthlySummary:
    workdays: int
    required_overtime_minutes: int
    remaining_rest_days: int
    total_overtime_minutes: int
    total_worked_minutes: int
    progress_pct: float
    remaining_overtime_minutes: int
    record_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_month(
    records: Iterable[TimeRecord],
    any_date_in_month: DateLike,
    reference_now: Optional[date] = None,
    calendar: Optional[CalendarPolicy] = None,
    policy: OvertimePolicy = DEFAULT_POLICY,
) -> MonthlySummary:
    cal = calendar or DEFAULT_CALENDAR
    now = reference_now or datetime.now().date()

    workdays = cal.workdays_in_month(any_date_in_month)
    required = required_overtime_minutes(workdays, policy.required_overtime_per_workday)
    month_records = filter_month_records(records, any_date_in_month)
    total_overtime = sum(r.overtime_minutes for r in month_records)
    total_worked = sum(r.worked_minutes for r in month_records)
    progress = min(100.0, total_overtime / required * 100) if required > 0 else 0.0

    return MonthlySummary(
        workdays=workdays,
        required_overtime_minutes=required,
        remaining_rest_days=cal.remaining_rest_days_in_month(now, any_date_in_month),
        total_overtime_minutes=total_overtime,
        total_worked_minutes=total_worked,
        progress_pct=progress,
        remaining_overtime_minutes=max(0, required - total_overtime),
        record_count=len(month_records),
    )
