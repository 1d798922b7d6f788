# backend/guidebook/tasks/__init__.py
"""
Celery tasks package for Guidebook.

Run the worker with: celery -A guidebook.tasks worker
and the scheduler with: celery -A guidebook.tasks beat
"""

from guidebook.tasks.booking_tasks import cancel_expired_bookings
from guidebook.tasks.celery_app import BaseTask, celery_app

__all__ = [
    "celery_app",
    "BaseTask",
    "cancel_expired_bookings",
]
