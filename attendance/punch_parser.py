"""
attendance.punch_parser — Extract a date and clock times from punch-screen OCR text.

The OCR engine is treated as a black box: whatever text it returns
(including an empty string) is valid input.  Parsing never raises;
problems are reported through :attr:`ParsedPunchRecord.warnings`.

Usage:
    from attendance.punch_parser import parse_punch_text

    rec = parse_punch_text("2024年3月15日 打卡 O9:OO - l8:OO")
    rec.date        # "2024-03-15"
    rec.times       # ["09:00", "18:00"]
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from .digits import DIGIT_LIKE_CLASS, normalize_digits

logger = logging.getLogger(__name__)

WARN_DATE_FALLBACK = "No date recognized, using the reference date."
WARN_NO_TIMES = "No valid punches found, manual entry required."
WARN_SINGLE_TIME = "Only one time point found, confirm start/end manually."


@dataclass
class ParsedPunchRecord:
    date: str
    times: List[str] = field(default_factory=list)
    start_time: str = ""
    end_time: str = ""
    is_valid: bool = False
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -----------------------------
# Date extraction
# -----------------------------

_YMD_RE = re.compile(r"(\d{4})[年/／\-.](\d{1,2})[月/／\-.](\d{1,2})")
_MD_RE = re.compile(r"(\d{1,2})月(\d{1,2})日")

DateMatch = Tuple[int, int, int]


def _valid_date(year: int, month: int, day: int) -> bool:
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def match_full_date(compact: str, reference: date) -> Optional[DateMatch]:
    m = _YMD_RE.search(compact)
    if not m:
        return None
    year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    if not _valid_date(year, month, day):
        return None
    return year, month, day


def match_month_day(compact: str, reference: date) -> Optional[DateMatch]:
    m = _MD_RE.search(compact)
    if not m:
        return None
    month, day = int(m.group(1)), int(m.group(2))
    if not _valid_date(reference.year, month, day):
        return None
    return reference.year, month, day


# Tried in order; the first matcher returning a value wins.
DATE_MATCHERS: Tuple[Callable[[str, date], Optional[DateMatch]], ...] = (
    match_full_date,
    match_month_day,
)


def format_ymd(year: int, month: int, day: int) -> str:
    return f"{year}-{month:02d}-{day:02d}"


def extract_date(text: str, reference: date) -> Tuple[str, Optional[str]]:
    """Return ``(iso_date, warning)``; *warning* is set only on fallback."""
    compact = re.sub(r"\s+", "", text)
    for matcher in DATE_MATCHERS:
        found = matcher(compact, reference)
        if found is not None:
            return format_ymd(*found), None
    logger.debug("no date in OCR text, falling back to %s", reference)
    return format_ymd(reference.year, reference.month, reference.day), WARN_DATE_FALLBACK


# -----------------------------
# Time extraction
# -----------------------------

_TIME_RE = re.compile(
    rf"({DIGIT_LIKE_CLASS}{{1,2}})\s*[:：.\-]\s*({DIGIT_LIKE_CLASS}{{1,2}})"
)


def _minutes_of(hhmm: str) -> int:
    h, m = hhmm.split(":")
    return int(h) * 60 + int(m)


def _date_spans(text: str) -> List[Tuple[int, int]]:
    return [(m.start(), m.end()) for m in _YMD_RE.finditer(text)]


def _overlaps(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    return not (a[1] <= b[0] or b[1] <= a[0])


def extract_times(text: str) -> List[str]:
    """Find every plausible ``HH:mm`` in *text*.

    Matches are digit-normalised and kept only when the hour is 0–23 and
    the minute 0–59, and never inside a numeric date such as
    ``2023-03-15``.  The result is de-duplicated and sorted by minutes
    since midnight.
    """
    spans = _date_spans(text)
    found: List[str] = []
    for m in _TIME_RE.finditer(text):
        if any(_overlaps((m.start(), m.end()), ds) for ds in spans):
            continue
        hours = int(normalize_digits(m.group(1)))
        minutes = int(normalize_digits(m.group(2)))
        if 0 <= hours <= 23 and 0 <= minutes <= 59:
            found.append(f"{hours:02d}:{minutes:02d}")
    return sorted(set(found), key=_minutes_of)


# -----------------------------
# High-level API
# -----------------------------

def parse_punch_text(text: str, reference: Optional[date] = None) -> ParsedPunchRecord:
    ref = reference or datetime.now().date()
    if isinstance(ref, datetime):
        ref = ref.date()
    text = text or ""

    warnings: List[str] = []
    iso_date, date_warning = extract_date(text, ref)
    if date_warning:
        warnings.append(date_warning)

    times = extract_times(text)
    if not times:
        warnings.append(WARN_NO_TIMES)
    elif len(times) == 1:
        warnings.append(WARN_SINGLE_TIME)

    start_time = times[0] if times else ""
    end_time = times[-1] if len(times) > 1 else ""

    return ParsedPunchRecord(
        date=iso_date,
        times=times,
        start_time=start_time,
        end_time=end_time,
        is_valid=bool(start_time and end_time),
        warnings=warnings,
    )
