# backend/guidebook/repositories/booking_repository.py
"""
Booking Repository for the Guidebook platform

Read side of the booking store used by the scheduling engine:
- Bookings of one employee on one date
- Bookings of one activity on one date
- Bookings in a date range, minus one status
- Expired unpaid bookings for the cleanup sweep
- Customer and admin booking lists
"""

from datetime import date, datetime
import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.activity import Activity
from ..models.booking import Booking, BookingStatus, PaymentStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Booking.activity).joinedload(Activity.category),
            joinedload(Booking.user),
            joinedload(Booking.employee),
        )

    def for_employee_and_date(
        self,
        employee_id: str,
        booking_date: date,
        exclude_cancelled: bool = True,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Get an employee's bookings on a date, ordered by start time.

        Args:
            employee_id: The assigned employee
            booking_date: The date to look at
            exclude_cancelled: Drop CANCELLED bookings (default)
            exclude_booking_id: Optional booking ID to leave out of the result

        Returns:
            Bookings with their activity and category loaded
        """
        try:
            query = self._apply_eager_loading(self.db.query(Booking)).filter(
                Booking.employee_id == employee_id,
                Booking.booking_date == booking_date,
            )
            if exclude_cancelled:
                query = query.filter(Booking.status != BookingStatus.CANCELLED.value)
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)

            return cast(List[Booking], query.order_by(Booking.start_time).all())

        except Exception as e:
            self.logger.error(f"Error getting bookings for employee/date: {str(e)}")
            raise RepositoryException(f"Failed to get employee bookings: {str(e)}")

    def for_activity_and_date(self, activity_id: str, booking_date: date) -> List[Booking]:
        """Get the non-cancelled bookings of an activity on a date."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(
                    Booking.activity_id == activity_id,
                    Booking.booking_date == booking_date,
                    Booking.status != BookingStatus.CANCELLED.value,
                )
                .order_by(Booking.start_time)
                .all(),
            )

        except Exception as e:
            self.logger.error(f"Error getting bookings for activity/date: {str(e)}")
            raise RepositoryException(f"Failed to get activity bookings: {str(e)}")

    def for_date_range_excluding_status(
        self, start_date: date, end_date: date, status: BookingStatus
    ) -> List[Booking]:
        """
        Get bookings between two dates (inclusive) whose status is not ``status``.

        Returns:
            Bookings ordered by date and start time
        """
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(
                    Booking.booking_date >= start_date,
                    Booking.booking_date <= end_date,
                    Booking.status != status.value,
                )
                .order_by(Booking.booking_date, Booking.start_time)
                .all(),
            )

        except Exception as e:
            self.logger.error(f"Error getting bookings for date range: {str(e)}")
            raise RepositoryException(f"Failed to get bookings in range: {str(e)}")

    def get_with_details(self, booking_id: str) -> Optional[Booking]:
        """Get a booking with activity, category, customer and employee loaded."""
        return self.get_by_id(booking_id, load_relationships=True)

    def find_expired_unpaid(self, now: datetime) -> List[Booking]:
        """Confirmed, unpaid bookings whose payment deadline has passed."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(
                    Booking.status == BookingStatus.CONFIRMED.value,
                    Booking.payment_status == PaymentStatus.UNPAID.value,
                    Booking.payment_deadline.isnot(None),
                    Booking.payment_deadline < now,
                )
                .all(),
            )

        except Exception as e:
            self.logger.error(f"Error getting expired bookings: {str(e)}")
            raise RepositoryException(f"Failed to get expired bookings: {str(e)}")

    def for_user(self, user_id: str) -> List[Booking]:
        """A customer's bookings, every status, by date and start time."""
        try:
            return cast(
                List[Booking],
                self._apply_eager_loading(self.db.query(Booking))
                .filter(Booking.user_id == user_id)
                .order_by(Booking.booking_date, Booking.start_time, Booking.id)
                .all(),
            )

        except Exception as e:
            self.logger.error(f"Error getting bookings for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to get user bookings: {str(e)}")

    def all_bookings(self, status: Optional[BookingStatus] = None) -> List[Booking]:
        """Every booking, optionally narrowed to one status."""
        try:
            query = self._apply_eager_loading(self.db.query(Booking))
            if status is not None:
                query = query.filter(Booking.status == status.value)
            return cast(
                List[Booking],
                query.order_by(Booking.booking_date, Booking.start_time, Booking.id).all(),
            )

        except Exception as e:
            self.logger.error(f"Error listing bookings: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}")
