"""
Calendar utility functions: date validation, parsing and formatting.

All functions are pure. Parsing helpers raise ValidationError so callers can
report a typed failure; the is_valid_* predicates never raise.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, tzinfo

from workcal.errors import ValidationError
from workcal.host.base import EventOptions


TIME_PATTERN = re.compile(r"^([0-9]{2}):([0-9]{2})$")
YEAR_MONTH_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})$")


def get_current_year_month(today: date | None = None) -> str:
    """Current month as YYYY-MM."""
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def get_next_year_month(today: date | None = None) -> str:
    """Following month as YYYY-MM (December rolls into January)."""
    today = today or date.today()
    if today.month == 12:
        return f"{today.year + 1:04d}-01"
    return f"{today.year:04d}-{today.month + 1:02d}"


def parse_year_month(value: str) -> tuple[int, int]:
    """Split YYYY-MM into (year, month)."""
    match = YEAR_MONTH_PATTERN.match(value or "")
    if not match:
        raise ValidationError(f"Invalid year-month: {value!r} (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month in year-month: {value!r}")
    return year, month


def is_valid_date(year: int, month: int, day: int) -> bool:
    """Check that (year, month, day) is a real calendar date, leap years included."""
    if not all(isinstance(part, int) and not isinstance(part, bool) for part in (year, month, day)):
        return False
    if month < 1 or month > 12 or year < 1 or year > 9999:
        return False
    days_in_month = calendar.monthrange(year, month)[1]
    return 1 <= day <= days_in_month


def is_valid_time_format(time_str: str) -> bool:
    """Check for a two-digit HH:mm string with hour 00-23 and minute 00-59."""
    if not isinstance(time_str, str):
        return False
    match = TIME_PATTERN.match(time_str)
    if not match:
        return False

    hour = int(match.group(1))
    minute = int(match.group(2))
    return 0 <= hour <= 23 and 0 <= minute <= 59


def parse_time_str(time_str: str) -> tuple[int, int]:
    if not is_valid_time_format(time_str):
        raise ValidationError(f"Invalid time format: {time_str!r} (expected HH:mm)")
    hour, minute = time_str.split(":")
    return int(hour), int(minute)


def parse_date_time(value: datetime | str, tz: tzinfo | None = None) -> datetime:
    """
    Parse a datetime or ISO-8601 string.

    Naive values are interpreted in tz when one is given.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise ValidationError(f"Invalid date-time format: {value}") from None
    else:
        raise ValidationError(f"Invalid date-time format: {value!r}")

    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_date(value: date | datetime | str) -> date:
    """Parse a date, a datetime (date part) or an ISO-8601 date/date-time string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        return parse_date_time(value).date()
    raise ValidationError(f"Invalid date format: {value!r}")


def build_event_options(
    description: str | None = None,
    location: str | None = None,
    guests: list[str] | None = None,
) -> EventOptions:
    """Collect optional event fields, dropping empty ones."""
    return EventOptions(
        description=description or None,
        location=location or None,
        guests=[guest for guest in (guests or []) if guest],
    )


def format_date(value: date | datetime, tz: tzinfo | None = None) -> str:
    """Format as YYYY-MM-DD."""
    if isinstance(value, datetime) and tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    return value.strftime("%Y-%m-%d")


def format_date_time(value: datetime, tz: tzinfo | None = None) -> str:
    """Format as YYYY-MM-DD HH:MM."""
    if tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    return value.strftime("%Y-%m-%d %H:%M")
