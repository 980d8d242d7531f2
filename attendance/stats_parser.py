"""
attendance.stats_parser — Read the monthly statistics summary screen.

The vendor's statistics page shows an average-work-hours figure computed
over *attendance* days, which includes weekend overtime days.  Dividing
the implied total by the month's real workday count gives the "correct"
average.  Each figure is located by a small set of independent matchers
(number-before-label, then label-before-number) tried in a fixed order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .overtime import reconcile

logger = logging.getLogger(__name__)

WARN_NO_AVG_HOURS = "Average work hours not recognized."
WARN_NO_ATTENDANCE_DAYS = "Attendance days not recognized."

LABEL_AVG_HOURS = "平均工时"
LABEL_ATTENDANCE_DAYS = "出勤天数"
LABEL_REST_DAYS = "休息天数"


@dataclass
class ParsedStatsRecord:
    year: int
    month: int
    avg_hours: float = 0.0
    attendance_days: int = 0
    rest_days: int = 0
    workdays: int = 0
    total_hours: float = 0.0
    correct_avg_hours: float = 0.0
    weekend_work_days: int = 0
    is_valid: bool = False
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


Matcher = Callable[[str], Optional[str]]


def _label_pattern(label: str) -> str:
    # OCR sometimes splits CJK labels with stray spaces.
    return r"\s*".join(re.escape(ch) for ch in label)


def number_before(label: str, number: str) -> Matcher:
    pattern = re.compile(rf"({number})\s*{_label_pattern(label)}")

    def _match(text: str) -> Optional[str]:
        m = pattern.search(text)
        return m.group(1) if m else None

    _match.__name__ = f"number_before_{label}"
    return _match


def label_before(label: str, number: str) -> Matcher:
    pattern = re.compile(rf"{_label_pattern(label)}\s*({number})")

    def _match(text: str) -> Optional[str]:
        m = pattern.search(text)
        return m.group(1) if m else None

    _match.__name__ = f"label_before_{label}"
    return _match


DECIMAL = r"\d+\.?\d*"
INTEGER = r"\d+"

AVG_HOURS_MATCHERS: Tuple[Matcher, ...] = (
    number_before(LABEL_AVG_HOURS, DECIMAL),
    label_before(LABEL_AVG_HOURS, DECIMAL),
)
ATTENDANCE_DAYS_MATCHERS: Tuple[Matcher, ...] = (
    number_before(LABEL_ATTENDANCE_DAYS, INTEGER),
    label_before(LABEL_ATTENDANCE_DAYS, INTEGER),
)
REST_DAYS_MATCHERS: Tuple[Matcher, ...] = (
    number_before(LABEL_REST_DAYS, INTEGER),
    label_before(LABEL_REST_DAYS, INTEGER),
)


def first_match(matchers: Sequence[Matcher], text: str) -> Optional[str]:
    for matcher in matchers:
        value = matcher(text)
        if value is not None:
            return value
    return None


_YEAR_MONTH_RE = re.compile(r"(\d{4})\s*年?\s*(\d{1,2})\s*月")
_MONTH_ONLY_RE = re.compile(r"(\d{1,2})\s*月")


def extract_year_month(text: str, reference: date) -> Tuple[int, int]:
    m = _YEAR_MONTH_RE.search(text)
    if m:
        return int(m.group(1)), int(m.group(2))
    m = _MONTH_ONLY_RE.search(text)
    if m:
        return reference.year, int(m.group(1))
    return reference.year, reference.month


def parse_stats_text(text: str, workdays: int, reference: Optional[date] = None) -> ParsedStatsRecord:
    ref = reference or datetime.now().date()
    normalized = re.sub(r"\s+", " ", text or "")

    year, month = extract_year_month(normalized, ref)

    raw_avg = first_match(AVG_HOURS_MATCHERS, normalized)
    raw_attendance = first_match(ATTENDANCE_DAYS_MATCHERS, normalized)
    raw_rest = first_match(REST_DAYS_MATCHERS, normalized)

    avg_hours = float(raw_avg) if raw_avg is not None else 0.0
    attendance_days = int(raw_attendance) if raw_attendance is not None else 0
    rest_days = int(raw_rest) if raw_rest is not None else 0

    warnings: List[str] = []
    if avg_hours == 0:
        warnings.append(WARN_NO_AVG_HOURS)
    if attendance_days == 0:
        warnings.append(WARN_NO_ATTENDANCE_DAYS)
    if warnings:
        logger.debug("stats text incomplete: %s", "; ".join(warnings))

    return reconcile(ParsedStatsRecord(
        year=year,
        month=month,
        avg_hours=avg_hours,
        attendance_days=attendance_days,
        rest_days=rest_days,
        workdays=workdays,
        warnings=warnings,
    ))
