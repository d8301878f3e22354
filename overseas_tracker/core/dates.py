"""
Calendar-day normalization.

Trips are tracked in whole days. Inputs arrive as plain ``YYYY-MM-DD``
strings, ISO timestamps from browsers, ``date`` or ``datetime`` objects.
Everything is reduced to a ``datetime.date``.
"""
from datetime import date, datetime
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

from overseas_tracker.core.exceptions import InvalidDateError

# What callers may submit for a day; reduced with normalize_date
DateInput = Union[datetime, date, str]


def _datetime_to_day(value: datetime, tz: Optional[ZoneInfo]) -> date:
    if value.tzinfo is not None and tz is not None:
        value = value.astimezone(tz)
    return value.date()


def normalize_date(value: Any, tz: Optional[ZoneInfo] = None, field: Optional[str] = None) -> Optional[date]:
    """
    Reduce a date-like value to a calendar day.

    Args:
        value: ``None``, ``date``, ``datetime`` or string
        tz: Calendar used to read timezone-aware timestamps
        field: Field name reported on failure

    Returns:
        The calendar day, or None for empty input

    Raises:
        InvalidDateError: If the value cannot be parsed as a date
    """
    if value is None:
        return None

    # datetime is a date subclass, check it first
    if isinstance(value, datetime):
        return _datetime_to_day(value, tz)
    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        raise InvalidDateError(value, field)

    text = value.strip()
    if not text:
        return None

    if "T" not in text and " " not in text:
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(value, field) from None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return _datetime_to_day(datetime.fromisoformat(text), tz)
    except ValueError:
        raise InvalidDateError(value, field) from None


def require_date(value: Any, field: str, tz: Optional[ZoneInfo] = None) -> date:
    """Like normalize_date, but empty input is an error."""
    day = normalize_date(value, tz, field)
    if day is None:
        raise InvalidDateError(value, field)
    return day
