"""
DateTime utilities for the shop's fixed-offset calendar.

"Today" is always computed in the shop's fixed UTC offset (KST by default),
never in the host's local timezone.
"""
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union

import pytz

from core.config import settings


WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


def shop_timezone(offset_minutes: Optional[int] = None) -> tzinfo:
    """Fixed-offset timezone of the shop."""
    if offset_minutes is None:
        offset_minutes = settings.shop_utc_offset_minutes
    return pytz.FixedOffset(offset_minutes)


def get_current_datetime(offset_minutes: Optional[int] = None) -> datetime:
    """Get current datetime in the shop timezone."""
    return datetime.now(pytz.utc).astimezone(shop_timezone(offset_minutes))


def get_today_key(
    offset_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Return today's date as YYYY-MM-DD in the shop timezone.

    Args:
        offset_minutes: UTC offset override, defaults to settings
        now: Aware datetime to use instead of the clock (naive values are treated as UTC)

    Returns:
        ISO date string
    """
    tz = shop_timezone(offset_minutes)
    if now is None:
        current = get_current_datetime(offset_minutes)
    elif now.tzinfo is None:
        current = pytz.utc.localize(now).astimezone(tz)
    else:
        current = now.astimezone(tz)
    return current.date().isoformat()


def to_date_key(value: Union[date, datetime, str, None]) -> Optional[str]:
    """Normalize a date-like value to a YYYY-MM-DD key."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        return None
    # Accept full ISO timestamps as well as plain dates
    return text[:10]


def shift_date_key(date_key: str, days: int) -> str:
    """Shift a YYYY-MM-DD key by a number of days."""
    return (date.fromisoformat(date_key) + timedelta(days=days)).isoformat()


def weekday_name(date_key: str) -> str:
    """Lowercase English weekday name for a YYYY-MM-DD key."""
    return WEEKDAYS[date.fromisoformat(date_key).weekday()]
