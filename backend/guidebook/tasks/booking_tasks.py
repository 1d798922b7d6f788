# backend/guidebook/tasks/booking_tasks.py
"""
Celery tasks for the booking lifecycle.
"""

import logging
from typing import Any, Callable, ParamSpec, Protocol, TypedDict, TypeVar, cast

from celery.result import AsyncResult
from sqlalchemy.orm import Session

from guidebook.core.timezone_utils import utc_now
from guidebook.services.booking_service import BookingService
from guidebook.tasks.celery_app import celery_app

P = ParamSpec("P")
R = TypeVar("R", covariant=True)


class TaskWrapper(Protocol[P, R]):
    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R:
        ...

    delay: Callable[..., AsyncResult]
    apply_async: Callable[..., AsyncResult]


def typed_task(
    *task_args: Any, **task_kwargs: Any
) -> Callable[[Callable[P, R]], TaskWrapper[P, R]]:
    """Return a typed Celery task decorator for mypy."""

    return cast(
        Callable[[Callable[P, R]], TaskWrapper[P, R]],
        celery_app.task(*task_args, **task_kwargs),
    )


class SweepResults(TypedDict):
    cancelled: int
    processed_at: str


logger = logging.getLogger(__name__)


@typed_task(bind=True, max_retries=3, name="guidebook.tasks.booking_tasks.cancel_expired_bookings")
def cancel_expired_bookings(self: Any) -> SweepResults:
    """
    Cancel confirmed, unpaid bookings whose payment deadline has passed.

    Runs every settings.expired_booking_sweep_minutes from beat.
    """
    from guidebook.database import SessionLocal

    db: Session = SessionLocal()
    try:
        now = utc_now()
        cancelled = BookingService(db).cancel_expired_bookings(now)
        logger.info(f"Expired booking sweep completed: {cancelled} cancelled")
        return {"cancelled": cancelled, "processed_at": now.isoformat()}

    except Exception as exc:
        logger.error(f"Expired booking sweep failed: {exc}")
        raise self.retry(exc=exc, countdown=300)
    finally:
        db.close()
