"""
Tests for working-day arithmetic
"""
from datetime import date

import pytest

from leaveflow.services.working_days import (
    calendar_days,
    count_working_days,
    is_working_day,
    next_working_day,
    previous_working_day,
    shift_days,
)


def test_full_week_counts_five_working_days():
    # Monday 2 March to Sunday 8 March 2026
    assert count_working_days(date(2026, 3, 2), date(2026, 3, 8)) == 5


def test_holidays_are_excluded():
    holidays = frozenset({date(2026, 3, 4)})
    assert count_working_days(date(2026, 3, 2), date(2026, 3, 6), holidays) == 4


def test_weekend_only_range_has_no_working_days():
    assert count_working_days(date(2026, 3, 7), date(2026, 3, 8)) == 0


def test_inverted_or_missing_range_counts_zero():
    assert count_working_days(date(2026, 3, 6), date(2026, 3, 2)) == 0
    assert count_working_days(None, date(2026, 3, 2)) == 0


def test_custom_weekend():
    # Friday/Saturday weekend
    assert count_working_days(date(2026, 3, 2), date(2026, 3, 8), weekend_days=(4, 5)) == 5
    assert not is_working_day(date(2026, 3, 6), weekend_days=(4, 5))
    assert is_working_day(date(2026, 3, 8), weekend_days=(4, 5))


def test_calendar_days_is_inclusive():
    assert calendar_days(date(2026, 3, 2), date(2026, 3, 2)) == 1
    assert calendar_days(date(2026, 3, 2), date(2026, 3, 8)) == 7


def test_next_and_previous_working_day_skip_weekend_and_holidays():
    holidays = frozenset({date(2026, 3, 9)})
    assert next_working_day(date(2026, 3, 6), holidays) == date(2026, 3, 10)
    assert previous_working_day(date(2026, 3, 10), holidays) == date(2026, 3, 6)


def test_all_week_weekend_is_rejected():
    with pytest.raises(ValueError):
        next_working_day(date(2026, 3, 2), weekend_days=range(7))


def test_shift_clamps_to_date_range():
    assert shift_days(date(2026, 3, 2), 31) == date(2026, 4, 2)
    assert shift_days(date(9999, 12, 20), 31) == date.max
    assert shift_days(date(1, 1, 5), -31) == date.min


def test_working_day_search_stops_at_date_range_edges():
    assert next_working_day(date.max) == date.max
    assert previous_working_day(date.min) == date.min
    # 9999-12-31 is a Friday
    assert next_working_day(date(9999, 12, 30)) == date.max


def test_long_ranges_are_counted_without_walking_each_day():
    assert count_working_days(date(2026, 3, 2), date(2026, 3, 29)) == 20
    assert count_working_days(date(2026, 3, 2), date.max) > 2_000_000
    holidays = frozenset({date(2026, 3, 4), date(2026, 3, 7)})
    # the Saturday holiday is already a weekend day
    assert count_working_days(date(2026, 3, 2), date(2026, 3, 29), holidays) == 19
