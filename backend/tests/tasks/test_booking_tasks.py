from datetime import date, datetime, time, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from guidebook.models.booking import Booking, BookingStatus
from guidebook.tasks.beat_schedule import get_beat_schedule
from guidebook.tasks.booking_tasks import cancel_expired_bookings
from guidebook.tasks.celery_app import celery_app
from tests.factories.scheduling_builders import (
    create_activity,
    create_booking,
    create_category,
    create_employee,
)


class TestCancelExpiredBookingsTask:
    @patch("guidebook.tasks.booking_tasks.utc_now")
    @patch("guidebook.database.SessionLocal")
    def test_cancels_overdue_bookings(self, mock_session_local, mock_now, db):
        now = datetime(2030, 7, 1, 12, 0, tzinfo=timezone.utc)
        mock_now.return_value = now
        mock_session_local.return_value = db

        category = create_category(db, "Adventure")
        activity = create_activity(db, "Zip Line", category)
        ana = create_employee(db, "ana")
        overdue = create_booking(
            db,
            activity,
            ana,
            date(2030, 7, 15),
            time(9, 0),
            status=BookingStatus.CONFIRMED,
            payment_deadline=now - timedelta(hours=2),
        )

        result = cancel_expired_bookings()

        assert result == {"cancelled": 1, "processed_at": now.isoformat()}
        assert db.get(Booking, overdue.id).status == BookingStatus.CANCELLED.value

    @patch("guidebook.tasks.booking_tasks.BookingService")
    @patch("guidebook.database.SessionLocal")
    def test_closes_session_and_retries_on_failure(self, mock_session_local, mock_service):
        mock_db = MagicMock()
        mock_session_local.return_value = mock_db
        mock_service.return_value.cancel_expired_bookings.side_effect = RuntimeError("db down")

        with patch.object(cancel_expired_bookings, "retry", side_effect=RuntimeError("retry")) as retry:
            with pytest.raises(RuntimeError, match="retry"):
                cancel_expired_bookings()

        retry.assert_called_once()
        assert retry.call_args.kwargs["countdown"] == 300
        mock_db.close.assert_called_once()


def test_beat_schedule_runs_sweep_on_configured_interval():
    schedule = get_beat_schedule(sweep_minutes=15)

    entry = schedule["cancel-expired-bookings"]
    assert entry["task"] == "guidebook.tasks.booking_tasks.cancel_expired_bookings"
    assert entry["schedule"] == timedelta(minutes=15)


def test_task_is_registered():
    assert "guidebook.tasks.booking_tasks.cancel_expired_bookings" in celery_app.tasks
