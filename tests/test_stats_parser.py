"""Tests for statistics-screen OCR text parsing."""

from datetime import date

import pytest

from attendance.stats_parser import (
    ATTENDANCE_DAYS_MATCHERS,
    AVG_HOURS_MATCHERS,
    WARN_NO_ATTENDANCE_DAYS,
    WARN_NO_AVG_HOURS,
    first_match,
    parse_stats_text,
)

REF = date(2024, 6, 20)

STATS_TEXT = """
2024年3月
9.43
平均工时
23 出勤天数
8 休息天数
"""


def test_full_statistics_screen():
    rec = parse_stats_text(STATS_TEXT, workdays=21, reference=REF)
    assert (rec.year, rec.month) == (2024, 3)
    assert rec.avg_hours == pytest.approx(9.43)
    assert rec.attendance_days == 23
    assert rec.rest_days == 8
    assert rec.workdays == 21
    assert rec.total_hours == pytest.approx(216.89)
    assert round(rec.correct_avg_hours, 2) == 10.33
    assert rec.weekend_work_days == 2
    assert rec.is_valid
    assert rec.warnings == []


def test_label_before_number():
    assert first_match(AVG_HOURS_MATCHERS, "平均工时 10.2") == "10.2"
    assert first_match(ATTENDANCE_DAYS_MATCHERS, "出勤天数 22") == "22"


def test_number_before_label_takes_priority():
    assert first_match(ATTENDANCE_DAYS_MATCHERS, "20 出勤天数 21") == "20"


def test_labels_split_by_ocr_spaces():
    rec = parse_stats_text("9.5 平 均 工 时 20 出 勤 天 数", workdays=20, reference=REF)
    assert rec.avg_hours == pytest.approx(9.5)
    assert rec.attendance_days == 20


def test_month_without_year_uses_reference_year():
    rec = parse_stats_text("3月 考勤统计", workdays=21, reference=date(2025, 6, 1))
    assert (rec.year, rec.month) == (2025, 3)


def test_empty_text_defaults():
    rec = parse_stats_text("", workdays=21, reference=REF)
    assert (rec.year, rec.month) == (2024, 6)
    assert rec.avg_hours == 0.0
    assert rec.attendance_days == 0
    assert rec.rest_days == 0
    assert rec.total_hours == 0.0
    assert not rec.is_valid
    assert rec.warnings == [WARN_NO_AVG_HOURS, WARN_NO_ATTENDANCE_DAYS]


def test_missing_attendance_only():
    rec = parse_stats_text("平均工时 10.5", workdays=21, reference=REF)
    assert rec.avg_hours == pytest.approx(10.5)
    assert rec.warnings == [WARN_NO_ATTENDANCE_DAYS]
    assert not rec.is_valid


def test_zero_workdays_gives_zero_correct_average():
    rec = parse_stats_text(STATS_TEXT, workdays=0, reference=REF)
    assert rec.correct_avg_hours == 0.0
    assert rec.weekend_work_days == 23
