# backend/guidebook/tasks/beat_schedule.py
"""
Celery Beat schedule configuration for Guidebook.
"""

from datetime import timedelta
from typing import Any, Dict, Optional

from guidebook.core.config import settings


def get_beat_schedule(sweep_minutes: Optional[int] = None) -> Dict[str, Dict[str, Any]]:
    """
    Build the periodic task schedule.

    Args:
        sweep_minutes: Interval of the expired booking sweep; defaults to
            settings.expired_booking_sweep_minutes
    """
    minutes = sweep_minutes or settings.expired_booking_sweep_minutes
    return {
        # Cancel confirmed bookings whose payment deadline has passed
        "cancel-expired-bookings": {
            "task": "guidebook.tasks.booking_tasks.cancel_expired_bookings",
            "schedule": timedelta(minutes=minutes),
            "options": {"queue": "bookings", "expires": minutes * 60},
        },
    }
