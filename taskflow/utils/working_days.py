# taskflow/utils/working_days.py
"""
Calendar helpers for deadlines.

Only Sunday is a non-working day; Saturday counts as a working day.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Tuple

from taskflow.errors import InvalidArgument

SUNDAY = 6

BUFFER_DAYS = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 2,
}


def subtract_working_days(target: date, days: int) -> date:
    """Step back from target until `days` non-Sunday days have been counted"""
    if isinstance(target, datetime) or not isinstance(target, date):
        raise InvalidArgument(f"Expected a date, got {target!r}")
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        raise InvalidArgument(f"Working days must be a non-negative integer, got {days!r}")

    current = target
    counted = 0
    while counted < days:
        current -= timedelta(days=1)
        if current.weekday() != SUNDAY:
            counted += 1
    return current


def buffer_days_for(urgency) -> int:
    value = getattr(urgency, "value", urgency)
    return BUFFER_DAYS.get(value, 2)


def buffer_deadline_for(deadline: date, urgency) -> date:
    return subtract_working_days(deadline, buffer_days_for(urgency))


def week_range(day: date) -> Tuple[date, date]:
    """Monday-to-Saturday working week containing `day`"""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=5)


def month_range(day: date) -> Tuple[date, date]:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)
