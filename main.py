"""High-level API + CLI for the overtime tracker."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any

from attendance.calendar_policy import DEFAULT_CALENDAR, CalendarPolicy
from attendance.punch_parser import ParsedPunchRecord
from attendance.records import (
    RecordValidationError,
    TimeRecord,
    create_record,
    filter_month_records,
    format_date_label,
    format_minutes,
    sort_by_date_desc,
    today_string,
)
from attendance.summary import summarize_month
from pipeline import OCREngine, RecordStore, RecordStoreError, ScreenshotPipeline, load_settings
from pipeline.settings import CONFIG_PATH, Settings

logger = logging.getLogger(__name__)


class OvertimeTrackerAPI:
    """High-level orchestration API usable from CLI or notebooks."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        calendar: CalendarPolicy | None = None,
        store: RecordStore | None = None,
        screenshots: ScreenshotPipeline | None = None,
    ):
        self.settings = settings or load_settings(CONFIG_PATH)
        self.calendar = calendar or DEFAULT_CALENDAR
        self.store = store or RecordStore(self.settings.storage.path, key=self.settings.storage.key)
        self.screenshots = screenshots or ScreenshotPipeline(
            engine=OCREngine(self.settings.ocr),
            calendar=self.calendar,
        )

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def add_record(self, record_date: str | date, start_time: str, end_time: str) -> TimeRecord:
        record = create_record(record_date, start_time, end_time, self.calendar, self.settings.policy)
        self.store.add(record)
        logger.info("Added %s %s-%s (%s, overtime %s)", record.date, record.start_time,
                    record.end_time, record.day_type, format_minutes(record.overtime_minutes))
        return record

    def accept_parsed(self, parsed: ParsedPunchRecord) -> TimeRecord | None:
        """Save an OCR-parsed punch record, but only when it is complete."""
        if not parsed.is_valid:
            logger.warning("Not saving %s: %s", parsed.date, " ".join(parsed.warnings) or "incomplete")
            return None
        return self.add_record(parsed.date, parsed.start_time, parsed.end_time)

    def delete_record(self, record_id: str) -> bool:
        return self.store.delete(record_id)

    def list_records(self, month: date | None = None) -> list[TimeRecord]:
        target = month or datetime.now().date()
        return sort_by_date_desc(filter_month_records(self.store.load(), target))

    def summary(self, month: date | None = None, reference_now: date | None = None) -> dict[str, Any]:
        target = month or datetime.now().date()
        return summarize_month(
            self.store.load(),
            target,
            reference_now=reference_now,
            calendar=self.calendar,
            policy=self.settings.policy,
        ).to_dict()

    def workdays(self, month: date | None = None) -> int:
        return self.calendar.workdays_in_month(month or datetime.now().date())

    # ------------------------------------------------------------------
    # Screenshots
    # ------------------------------------------------------------------

    def recognize_punches(
        self,
        paths: list[str | Path],
        *,
        is_text: bool = False,
        save: bool = False,
    ) -> list[dict[str, Any]]:
        outputs = []
        for rec in self.screenshots.read_punches(paths, is_text=is_text):
            out = rec.to_dict()
            if save and rec.punch is not None:
                try:
                    saved = self.accept_parsed(rec.punch)
                except RecordValidationError as exc:
                    logger.warning("Not saving %s: %s", rec.source, exc)
                    out["save_error"] = str(exc)
                    saved = None
                out["saved_record"] = saved.to_dict() if saved else None
            outputs.append(out)
        return outputs

    def recognize_stats(
        self,
        path: str | Path,
        *,
        is_text: bool = False,
        month: date | None = None,
    ) -> dict[str, Any]:
        return self.screenshots.read_stats(path, is_text=is_text, month=month).to_dict()


# -------------------- CLI commands --------------------

def _month_arg(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM, got '{value}'") from None


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_add(api: OvertimeTrackerAPI, args: argparse.Namespace) -> None:
    record_date = args.date or today_string()
    _print_json(api.add_record(record_date, args.start, args.end).to_dict())


def cmd_delete(api: OvertimeTrackerAPI, args: argparse.Namespace) -> None:
    if not api.delete_record(args.record_id):
        print(f"[delete] No record with id {args.record_id}")
        sys.exit(1)
    print(f"[delete] Removed {args.record_id}")


def cmd_list(api: OvertimeTrackerAPI, args: argparse.Namespace) -> None:
    records = api.list_records(args.month)
    for r in records:
        kind = "rest day" if r.day_type == "restDay" else "workday"
        print(
            f"{r.id[:8]}  {format_date_label(r.date)}  {r.start_time}-{r.end_time}  "
            f"{kind:<8}  worked {format_minutes(r.worked_minutes)}  "
            f"overtime {format_minutes(r.overtime_minutes)}"
        )
    print(f"[list] {len(records)} record(s)")


def cmd_summary(api: OvertimeTrackerAPI, args: argparse.Namespace) -> None:
    _print_json(api.summary(args.month))


def cmd_workdays(api: OvertimeTrackerAPI, args: argparse.Namespace) -> None:
    print(api.workdays(args.month))


def cmd_ocr_punch(api: OvertimeTrackerAPI, args: argparse.Namespace) -> None:
    _print_json(api.recognize_punches(args.paths, is_text=args.text, save=args.save))


def cmd_ocr_stats(api: OvertimeTrackerAPI, args: argparse.Namespace) -> None:
    _print_json(api.recognize_stats(args.path, is_text=args.text, month=args.month))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Overtime tracker with screenshot OCR")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH, help="Path to settings.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    add_p = sub.add_parser("add", help="Add a record manually")
    add_p.add_argument("date", nargs="?", default=None, help="YYYY-MM-DD (default: today)")
    add_p.add_argument("start", help="HH:mm")
    add_p.add_argument("end", help="HH:mm")

    del_p = sub.add_parser("delete", help="Delete a record by id")
    del_p.add_argument("record_id")

    for name, help_text in (
        ("list", "List a month's records, newest first"),
        ("summary", "Show a month's overtime progress"),
        ("workdays", "Print the number of workdays in a month"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--month", type=_month_arg, default=None, help="YYYY-MM (default: current)")

    punch_p = sub.add_parser("ocr-punch", help="Read punch screenshots")
    punch_p.add_argument("paths", nargs="+", help="Image files (or .txt with --text)")
    punch_p.add_argument("--text", action="store_true", help="Inputs are OCR text files")
    punch_p.add_argument("--save", action="store_true", help="Save every complete result")

    stats_p = sub.add_parser("ocr-stats", help="Read a monthly statistics screenshot")
    stats_p.add_argument("path", help="Image file (or .txt with --text)")
    stats_p.add_argument("--text", action="store_true", help="Input is an OCR text file")
    stats_p.add_argument("--month", type=_month_arg, default=None, help="YYYY-MM to reconcile against")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    logging.basicConfig(level=settings.log_level, format="[%(name)s] %(message)s")
    api = OvertimeTrackerAPI(settings)

    commands = {
        "add": cmd_add,
        "delete": cmd_delete,
        "list": cmd_list,
        "summary": cmd_summary,
        "workdays": cmd_workdays,
        "ocr-punch": cmd_ocr_punch,
        "ocr-stats": cmd_ocr_stats,
    }
    try:
        commands[args.command](api, args)
    except (RecordValidationError, RecordStoreError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
