"""
attendance — OCR punch-text interpretation and overtime accounting.

Every module in this package is pure: no I/O, no shared mutable state.
Parsers never raise on OCR input; they return a best-effort result with
a ``warnings`` list instead.

Modules
-------
digits              Confusable-glyph → digit normalisation.
calendar_policy     Statutory holiday / shifted-workday tables and the
                    rest-day, workday-count and remaining-weekend queries.
punch_parser        Date + clock-time extraction from a punch screen.
stats_parser        Average-hours / attendance / rest-day extraction from
                    a monthly statistics screen.
overtime            Worked minutes (lunch deduction), overtime minutes and
                    vendor-average reconciliation.
records             The persisted ``TimeRecord`` and its helpers.
summary             Monthly progress toward the required overtime.

Usage
-----
    from attendance import parse_punch_text, create_record

    parsed = parse_punch_text(ocr_text)
    if parsed.is_valid:
        rec = create_record(parsed.date, parsed.start_time, parsed.end_time)
"""

from .calendar_policy import (
    DEFAULT_CALENDAR,
    CalendarPolicy,
    is_holiday,
    is_rest_day,
    is_shifted_workday,
    remaining_rest_days_in_month,
    required_overtime_minutes,
    workdays_in_month,
)
from .digits import normalize_digits
from .overtime import REST_DAY, WORKDAY, OvertimePolicy, classify, overtime_minutes, reconcile, worked_minutes
from .punch_parser import ParsedPunchRecord, extract_times, parse_punch_text
from .records import RecordValidationError, TimeRecord, create_record
from .stats_parser import ParsedStatsRecord, parse_stats_text
from .summary import MonthlySummary, summarize_month

__all__ = [
    "CalendarPolicy",
    "DEFAULT_CALENDAR",
    "is_holiday",
    "is_shifted_workday",
    "is_rest_day",
    "workdays_in_month",
    "remaining_rest_days_in_month",
    "required_overtime_minutes",
    "normalize_digits",
    "WORKDAY",
    "REST_DAY",
    "OvertimePolicy",
    "classify",
    "worked_minutes",
    "overtime_minutes",
    "reconcile",
    "ParsedPunchRecord",
    "extract_times",
    "parse_punch_text",
    "ParsedStatsRecord",
    "parse_stats_text",
    "TimeRecord",
    "RecordValidationError",
    "create_record",
    "MonthlySummary",
    "summarize_month",
]
