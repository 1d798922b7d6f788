"""
Timezone utilities for the Guidebook platform.

Slot times are local wall-clock times in one platform timezone; these helpers
answer "what is now / today" in that timezone.
"""

from datetime import date, datetime
from typing import Optional

import pytz

from .config import settings


def get_platform_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Get the platform timezone.

    Args:
        name: Optional override of settings.timezone

    Returns:
        pytz timezone object
    """
    return pytz.timezone(name or settings.timezone)


def get_local_now() -> datetime:
    """Current datetime in the platform timezone."""
    return datetime.now(get_platform_timezone())


def get_local_today() -> date:
    """
    Get 'today' in the platform timezone.

    Returns:
        Today's date in the platform timezone
    """
    return get_local_now().date()


def utc_now() -> datetime:
    """Timezone-aware current UTC datetime."""
    return datetime.now(pytz.UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive values are assumed to be UTC already (SQLite drops tzinfo).
    """
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)
