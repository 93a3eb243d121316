"""Date arithmetic for turning durations and offsets into calendar dates."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TypeVar

SECONDS_PER_DAY = 24 * 60 * 60

# Saturday and Sunday, as returned by date.weekday()
WEEKEND_DAYS = frozenset({5, 6})

DateT = TypeVar("DateT", date, datetime)


def add_calendar_days(start: DateT, days: int) -> DateT:
    """Shift a date by a number of calendar days (negative moves backwards)."""
    return start + timedelta(days=days)


def add_business_days(start: DateT, days: int) -> DateT:
    """Advance a date by a number of business days, skipping weekends.

    Steps forward one calendar day at a time and counts only weekdays, so
    starting on a Friday and adding one business day lands on Monday. Zero
    (or a negative count) returns the start date unchanged.
    """
    current = start
    added = 0
    while added < days:
        current = current + timedelta(days=1)
        if current.weekday() not in WEEKEND_DAYS:
            added += 1
    return current


def days_between(first: date | datetime, second: date | datetime) -> int:
    """Absolute number of whole calendar days between two dates.

    The order of the arguments does not matter. Sub-day differences from
    datetime inputs are rounded to the nearest day.
    """
    delta = second - first  # type: ignore[operator]
    return abs(round(delta.total_seconds() / SECONDS_PER_DAY))


def is_business_day(day: date | datetime) -> bool:
    """Check whether a date falls on a weekday."""
    return day.weekday() not in WEEKEND_DAYS
