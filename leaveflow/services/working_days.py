"""
Working-day arithmetic. Pure functions over an explicit holiday set.
"""
from datetime import date, timedelta
from typing import AbstractSet, Iterable, Optional, Tuple

# Monday=0 ... Sunday=6
DEFAULT_WEEKEND_DAYS: Tuple[int, ...] = (5, 6)


def is_weekend(day: date, weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS) -> bool:
    return day.weekday() in tuple(weekend_days)


def is_working_day(
    day: date,
    holidays: AbstractSet[date] = frozenset(),
    weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
) -> bool:
    return not is_weekend(day, weekend_days) and day not in holidays


def shift_days(day: date, days: int) -> date:
    """``day`` moved by ``days``, clamped to the representable date range."""
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def count_working_days(
    start_date: Optional[date],
    end_date: Optional[date],
    holidays: AbstractSet[date] = frozenset(),
    weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
) -> int:
    """
    Count days between start_date and end_date (inclusive) that are neither
    weekend days nor holidays.

    Args:
        start_date: First day of the range
        end_date: Last day of the range
        holidays: Active holiday dates
        weekend_days: Weekday numbers treated as weekend

    Returns:
        Number of working days; 0 for a missing or inverted range
    """
    if start_date is None or end_date is None or start_date > end_date:
        return 0

    weekend = set(weekend_days)
    full_weeks, remainder = divmod(calendar_days(start_date, end_date), 7)
    count = full_weeks * (7 - len(weekend))
    first = start_date.weekday()
    count += sum(1 for offset in range(remainder) if (first + offset) % 7 not in weekend)
    count -= sum(
        1 for day in set(holidays)
        if start_date <= day <= end_date and day.weekday() not in weekend
    )
    return count


def calendar_days(start_date: date, end_date: date) -> int:
    """Inclusive calendar span."""
    return (end_date - start_date).days + 1


def next_working_day(
    day: date,
    holidays: AbstractSet[date] = frozenset(),
    weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
) -> date:
    """First working day strictly after ``day``; stops at ``date.max``."""
    weekend = tuple(weekend_days)
    if len(set(weekend)) >= 7:
        raise ValueError("weekend_days covers the whole week")
    current = shift_days(day, 1)
    while current < date.max and not is_working_day(current, holidays, weekend):
        current = shift_days(current, 1)
    return current


def previous_working_day(
    day: date,
    holidays: AbstractSet[date] = frozenset(),
    weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
) -> date:
    """Last working day strictly before ``day``; stops at ``date.min``."""
    weekend = tuple(weekend_days)
    if len(set(weekend)) >= 7:
        raise ValueError("weekend_days covers the whole week")
    current = shift_days(day, -1)
    while current > date.min and not is_working_day(current, holidays, weekend):
        current = shift_days(current, -1)
    return current
