"""
attendance.records — The persisted ``TimeRecord`` value object.

Records are created once (manual entry or an accepted OCR parse) and
never mutated.  Day type and the derived minute counts are frozen at
creation time, so later calendar changes do not rewrite history.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from .calendar_policy import CalendarPolicy, DateLike, as_date
from .overtime import (
    DAY_TYPES,
    DEFAULT_POLICY,
    REST_DAY,
    OvertimePolicy,
    classify,
    overtime_minutes,
    parse_hhmm,
    worked_minutes,
)

_WEEKDAY_LABELS = ("星期一", "星期二", "星期三", "星期四", "星期五", "星期六", "星期日")


class RecordValidationError(ValueError):
    """Raised when a record cannot be created from the given inputs."""


@dataclass(frozen=True)
class TimeRecord:
    id: str
    date: str                 # YYYY-MM-DD
    start_time: str           # HH:mm
    end_time: str             # HH:mm
    day_type: str             # "workday" | "restDay"
    worked_minutes: int
    overtime_minutes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "dayType": self.day_type,
            "workedMinutes": self.worked_minutes,
            "overtimeMinutes": self.overtime_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeRecord":
        day_type = data.get("dayType") or data.get("type")
        # Older stores tagged rest days as "weekend".
        if day_type == "weekend":
            day_type = REST_DAY
        if day_type not in DAY_TYPES:
            raise RecordValidationError(f"Unknown day type: {day_type!r}")
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            start_time=str(data["startTime"]),
            end_time=str(data["endTime"]),
            day_type=day_type,
            worked_minutes=int(data["workedMinutes"]),
            overtime_minutes=int(data["overtimeMinutes"]),
        )


def generate_id() -> str:
    return uuid.uuid4().hex


def create_record(
    record_date: DateLike,
    start_time: str,
    end_time: str,
    calendar: Optional[CalendarPolicy] = None,
    policy: OvertimePolicy = DEFAULT_POLICY,
) -> TimeRecord:
    """Classify the day and compute worked/overtime minutes for a new record."""
    try:
        d = as_date(record_date)
        start_m = parse_hhmm(start_time)
        end_m = parse_hhmm(end_time)
    except (TypeError, ValueError) as exc:
        raise RecordValidationError(str(exc)) from exc
    if end_m < start_m:
        raise RecordValidationError(
            f"End time {end_time} is earlier than start time {start_time}"
        )

    start_norm = f"{start_m // 60:02d}:{start_m % 60:02d}"
    end_norm = f"{end_m // 60:02d}:{end_m % 60:02d}"
    day_type = classify(d, calendar)
    worked = worked_minutes(start_norm, end_norm, policy)
    return TimeRecord(
        id=generate_id(),
        date=d.isoformat(),
        start_time=start_norm,
        end_time=end_norm,
        day_type=day_type,
        worked_minutes=worked,
        overtime_minutes=overtime_minutes(worked, day_type, policy),
    )


def filter_month_records(records: Iterable[TimeRecord], any_date_in_month: DateLike) -> List[TimeRecord]:
    target = as_date(any_date_in_month)
    out: List[TimeRecord] = []
    for rec in records:
        d = as_date(rec.date)
        if (d.year, d.month) == (target.year, target.month):
            out.append(rec)
    return out


def sort_by_date_desc(records: Iterable[TimeRecord]) -> List[TimeRecord]:
    return sorted(records, key=lambda r: r.date, reverse=True)


def format_minutes(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_date_label(value: DateLike) -> str:
    d = as_date(value)
    return f"{d.month}月{d.day}日 {_WEEKDAY_LABELS[d.weekday()]}"


def today_string(reference_now: Optional[date] = None) -> str:
    return (reference_now or datetime.now()).strftime("%Y-%m-%d")
