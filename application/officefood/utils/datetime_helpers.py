"""
Utility functions for UTC dates, month windows and ISO formatting.
"""

import calendar
from datetime import date, datetime, time, timezone
from typing import Optional, Tuple


def utc_now() -> datetime:
    """
    Get current datetime in UTC.
    Returns:
        Current timezone-aware datetime
    """
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values read back from SQLite; convert aware ones."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime as ISO-8601 with a trailing Z.

    Args:
        dt: datetime object to format

    Returns:
        String like "2024-01-15T14:30:00.000Z" or None if dt is None
    """
    if dt is None:
        return None
    dt = as_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    Half-open UTC window covering a calendar month.

    Returns:
        (first instant of the month, first instant of the next month)
    """
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_name(month: int) -> str:
    return calendar.month_name[month]


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (accepts a trailing Z) into an aware UTC datetime."""
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
