"""Tests for holiday tables and rest-day classification."""

from datetime import date

from attendance.calendar_policy import (
    SHIFTED_WORKDAYS,
    STATUTORY_HOLIDAYS,
    CalendarPolicy,
    is_holiday,
    is_rest_day,
    is_shifted_workday,
    remaining_rest_days_in_month,
    required_overtime_minutes,
    workdays_in_month,
)


def test_plain_weekend_and_weekday():
    assert is_rest_day("2024-03-16")      # Saturday
    assert is_rest_day("2024-03-17")      # Sunday
    assert not is_rest_day("2024-03-15")  # Friday


def test_weekday_holiday_is_rest_day():
    assert is_holiday("2024-10-01")
    assert is_rest_day(date(2024, 10, 1))


def test_shifted_weekend_is_workday():
    assert is_shifted_workday("2024-10-12")
    assert not is_rest_day("2024-10-12")


def test_holiday_wins_over_shift_override():
    d = date(2024, 3, 16)
    policy = CalendarPolicy.from_iterables(holidays=[d], shifted_workdays=[d])
    assert policy.is_rest_day(d)


def test_shift_override_alone_makes_weekend_a_workday():
    policy = CalendarPolicy.from_iterables(shifted_workdays=["2024-03-16"])
    assert not policy.is_rest_day("2024-03-16")


def test_tables_are_well_formed():
    assert not (STATUTORY_HOLIDAYS & SHIFTED_WORKDAYS)
    assert all(d.weekday() >= 5 for d in SHIFTED_WORKDAYS)


def test_outside_table_range_falls_back_to_weekends():
    assert not is_rest_day("2030-01-01")  # Tuesday, not tabulated
    assert workdays_in_month("2030-01-15") == 23


def test_workdays_in_month():
    assert workdays_in_month("2024-03-01") == 21
    # Spring Festival: 5 weekday holidays, 2 shifted Sundays
    assert workdays_in_month(date(2024, 2, 10)) == 18
    # National Day: 5 weekday holidays, Saturday 12th shifted
    assert workdays_in_month("2024-10-31") == 19


def test_remaining_rest_days_current_month_counts_from_today():
    # 16, 17, 23, 24, 30, 31
    assert remaining_rest_days_in_month(date(2024, 3, 15), date(2024, 3, 1)) == 6
    assert remaining_rest_days_in_month(date(2024, 3, 31), date(2024, 3, 1)) == 1


def test_remaining_rest_days_other_month_counts_plain_weekends():
    # October 2024 has 8 weekend days; holidays and the shifted 12th are ignored.
    assert remaining_rest_days_in_month(date(2024, 3, 15), date(2024, 10, 1)) == 8


def test_required_overtime_minutes():
    assert required_overtime_minutes(21) == 2520
    assert required_overtime_minutes(0) == 0
