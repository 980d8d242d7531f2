"""
ScreenshotPipeline — turns attendance-app screenshots into parsed records.

Flow
----
  1. run_ocr            — image (or paired .txt) → raw text
  2. parse_punch_text   — punch screen → date + clock times
     parse_stats_text   — statistics screen → vendor average + reconciliation
  3. Recognition        — parsed result plus a user-facing status message

OCR failures never escape as exceptions: they become a Recognition with
``status="error"`` so the caller can offer a retry or manual entry.

Usage
-----
    from pipeline.screenshot_pipeline import ScreenshotPipeline
    sp = ScreenshotPipeline()
    rec = sp.read_punch("punch.png")
    if rec.punch and rec.punch.is_valid:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from attendance.calendar_policy import DEFAULT_CALENDAR, CalendarPolicy
from attendance.punch_parser import ParsedPunchRecord, parse_punch_text
from attendance.stats_parser import ParsedStatsRecord, parse_stats_text

from .ocr_adapter import OCREngine, OCRError, run_ocr

logger = logging.getLogger("screenshot_pipeline")
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("[ocr] %(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

MSG_READY = "Recognition complete, ready to save."
MSG_CONFIRM = "Recognition complete, please confirm the result."
MSG_FAILED = "Recognition failed, try a clearer image or manual entry."

PathLike = Union[str, Path]


@dataclass
class Recognition:
    """Outcome of reading one screenshot."""

    source: str
    status: str                                   # "success" | "error"
    message: str
    engine: Optional[str] = None                  # "txt" | "paddleocr"
    raw_text: str = ""
    punch: Optional[ParsedPunchRecord] = None
    stats: Optional[ParsedStatsRecord] = None
    error: Optional[str] = None
    retryable: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "status": self.status,
            "message": self.message,
            "engine": self.engine,
            "raw_text": self.raw_text,
            "punch": self.punch.to_dict() if self.punch else None,
            "stats": self.stats.to_dict() if self.stats else None,
            "error": self.error,
            "retryable": self.retryable,
            "warnings": list(self.warnings),
        }


class ScreenshotPipeline:
    def __init__(
        self,
        engine: Optional[OCREngine] = None,
        calendar: Optional[CalendarPolicy] = None,
    ):
        self.engine = engine or OCREngine()
        self.calendar = calendar or DEFAULT_CALENDAR

    def _read_text(self, path: PathLike, is_text: bool) -> Dict[str, Any]:
        if is_text:
            return run_ocr(txt_path=path)
        return run_ocr(image_path=path, engine=self.engine)

    def _failure(self, source: str, exc: OCRError) -> Recognition:
        logger.warning("OCR failed for %s: %s", source, exc)
        return Recognition(
            source=source,
            status="error",
            message=MSG_FAILED,
            error=str(exc),
            retryable=exc.retryable,
        )

    def read_punch(
        self,
        path: PathLike,
        *,
        is_text: bool = False,
        reference_now: Optional[date] = None,
    ) -> Recognition:
        source = str(path)
        try:
            ocr = self._read_text(path, is_text)
        except OCRError as exc:
            return self._failure(source, exc)

        parsed = parse_punch_text(ocr["text"], reference_now or datetime.now().date())
        logger.info("%s → %s %s (%d time(s))", source, parsed.date, parsed.times, len(parsed.times))
        return Recognition(
            source=source,
            status="success",
            message=MSG_READY if parsed.is_valid else MSG_CONFIRM,
            engine=ocr["engine"],
            raw_text=ocr["text"],
            punch=parsed,
            warnings=list(parsed.warnings),
        )

    def read_punches(
        self,
        paths: Iterable[PathLike],
        *,
        is_text: bool = False,
        reference_now: Optional[date] = None,
    ) -> List[Recognition]:
        """Read several screenshots in order; one failure does not stop the rest."""
        return [self.read_punch(p, is_text=is_text, reference_now=reference_now) for p in paths]

    def read_stats(
        self,
        path: PathLike,
        *,
        is_text: bool = False,
        month: Optional[date] = None,
        reference_now: Optional[date] = None,
    ) -> Recognition:
        """Read a statistics screenshot and reconcile against the real workday count.

        The workday count is taken for *month* when given, otherwise for
        the year/month recognised in the text.
        """
        source = str(path)
        try:
            ocr = self._read_text(path, is_text)
        except OCRError as exc:
            return self._failure(source, exc)

        ref = reference_now or datetime.now().date()
        if month is not None:
            workdays = self.calendar.workdays_in_month(month)
            parsed = parse_stats_text(ocr["text"], workdays, ref)
        else:
            first_pass = parse_stats_text(ocr["text"], 0, ref)
            year, month_no = first_pass.year, first_pass.month
            if not 1 <= month_no <= 12:
                year, month_no = ref.year, ref.month
            workdays = self.calendar.workdays_in_month(date(year, month_no, 1))
            parsed = parse_stats_text(ocr["text"], workdays, ref)

        logger.info(
            "%s → %d-%02d avg %.2fh over %d day(s), corrected %.2fh",
            source, parsed.year, parsed.month, parsed.avg_hours,
            parsed.attendance_days, parsed.correct_avg_hours,
        )
        return Recognition(
            source=source,
            status="success",
            message=MSG_READY if parsed.is_valid else MSG_CONFIRM,
            engine=ocr["engine"],
            raw_text=ocr["text"],
            stats=parsed,
            warnings=list(parsed.warnings),
        )
