from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Union

TimeLike = Union[time, str]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_time_of_day(value: TimeLike) -> time:
    """Parse a shift time ('HH:MM' or 'HH:MM:SS') into a time.

    Raises ValueError for malformed strings and TypeError for other types.
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise TypeError(f"Unsupported time value type: {type(value)!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time string: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    seconds = int(parts[2]) if len(parts) == 3 else 0
    return time(hour=hours, minute=minutes, second=seconds)


def at_time(day: date, value: TimeLike) -> datetime:
    """Concrete local datetime for `value` on calendar day `day`."""
    return datetime.combine(day, parse_time_of_day(value))


def whole_minutes(delta: timedelta) -> int:
    """Floor a timedelta to whole minutes (0 for negative spans)."""
    return max(int(delta.total_seconds() // 60), 0)


def daterange(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)
