# backend/guidebook/services/capacity_checker.py
"""
Capacity Checker Service for the Guidebook platform

Decides whether an employee can take one more booking on top of the bookings
they already hold at that time. A guide may run several groups side by side
when every group is the same category of activity at the same place and the
combined headcount stays within the category's per-guide ceiling.

Read-only: nothing here mutates state.
"""

from datetime import date, time
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.activity import Activity
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..utils.time_utils import overlaps
from .base import BaseService

logger = logging.getLogger(__name__)

INCOMPATIBLE_CATEGORY = "category"
INCOMPATIBLE_LOCATION = "location"


def activities_compatible(first: Activity, second: Activity) -> Tuple[bool, Optional[str]]:
    """
    Category and location rule for sharing a guide, without headcount.

    Returns:
        (True, None) when compatible, else (False, "category" | "location")
    """
    if (
        first.category_id is None
        or second.category_id is None
        or first.category_id != second.category_id
    ):
        return False, INCOMPATIBLE_CATEGORY
    if not first.has_same_location_as(second):
        return False, INCOMPATIBLE_LOCATION
    return True, None


class CapacityChecker(BaseService):
    """
    Capacity-sharing rule for one employee at one time.

    Works off the employee's bookings for the day; the caller passes the
    candidate activity and headcount.
    """

    def __init__(self, db: Session, booking_repository: Optional[BookingRepository] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(
            db
        )

    def overlapping_bookings(
        self,
        employee_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Employee's non-cancelled bookings on a date that overlap [start_time, end_time)."""
        bookings = self.booking_repository.for_employee_and_date(
            employee_id,
            check_date,
            exclude_cancelled=True,
            exclude_booking_id=exclude_booking_id,
        )
        return [b for b in bookings if overlaps(start_time, end_time, b.start_time, b.end_time)]

    def can_employee_handle(
        self,
        employee_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        candidate_activity: Activity,
        candidate_participants: int,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """
        Check whether an employee can additionally take a candidate booking.

        Args:
            employee_id: The employee to check
            check_date: Date of the candidate booking
            start_time: Candidate start
            end_time: Candidate end
            candidate_activity: Activity of the candidate booking
            candidate_participants: Headcount of the candidate booking
            exclude_booking_id: Booking to leave out of the employee's load,
                e.g. the booking being moved or handed off

        Returns:
            True if the employee is free at that time, or every overlapping
            booking is the same category at the same location and the total
            headcount fits the category ceiling
        """
        overlapping = self.overlapping_bookings(
            employee_id, check_date, start_time, end_time, exclude_booking_id
        )
        if not overlapping:
            return True

        category = candidate_activity.category
        if category is None:
            self.logger.debug(
                f"Employee {employee_id} busy at {start_time}-{end_time} and activity "
                f"{candidate_activity.id} has no category; cannot share"
            )
            return False

        headcount = candidate_participants
        for booking in overlapping:
            compatible, reason = activities_compatible(candidate_activity, booking.activity)
            if not compatible:
                self.logger.debug(
                    f"Employee {employee_id} cannot share booking {booking.id}: {reason} mismatch"
                )
                return False
            headcount += booking.number_of_participants

        limit = category.max_participants_per_guide
        if headcount > limit:
            self.logger.debug(
                f"Employee {employee_id} over capacity on {check_date} {start_time}-{end_time}: "
                f"{headcount} > {limit}"
            )
            return False

        return True
