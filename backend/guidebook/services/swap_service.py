# backend/guidebook/services/swap_service.py
"""
Swap Service for the Guidebook platform

Supports manual employee reassignment by admins. When the employee picked
for a booking is already busy at that time, the conflicting booking can be
handed to the booking's current employee in exchange, provided both
activities share category and location and both guides stay within
capacity afterwards.

check_swap and swap_options are read-only; swap mutates two bookings in one
transaction.
"""

from dataclasses import dataclass, field
from datetime import date, time
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import IncompatibleSwapException, NotFoundException
from ..models.booking import Booking
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.user_repository import UserRepository
from .base import BaseService
from .capacity_checker import (
    INCOMPATIBLE_CATEGORY,
    CapacityChecker,
    activities_compatible,
)

logger = logging.getLogger(__name__)

NO_CONFLICT_REASON = "No conflict - direct assignment possible"
FAILED_RULE_CAPACITY = "capacity"

_INCOMPATIBLE_REASONS = {
    INCOMPATIBLE_CATEGORY: "Activities not compatible - different category",
    "location": "Activities not compatible - different location",
}


@dataclass(frozen=True)
class SwapAssessment:
    """Outcome of checking a reassignment against the new employee's schedule."""

    swap_needed: bool
    can_swap: bool
    reason: Optional[str] = None
    failed_rule: Optional[str] = None
    conflicting_booking_id: Optional[str] = None
    conflicting_booking_activity: Optional[str] = None
    current_employee_name: Optional[str] = None
    new_employee_name: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


@dataclass(frozen=True)
class CompatibleBooking:
    booking_id: str
    customer_name: Optional[str]
    is_guest_booking: bool
    activity_name: str
    number_of_participants: int
    start_time: time
    end_time: time
    booking_date: date


@dataclass(frozen=True)
class SwapOptions:
    has_compatible_bookings: bool
    compatible_bookings: List[CompatibleBooking] = field(default_factory=list)
    reason: Optional[str] = None
    current_employee_name: Optional[str] = None
    new_employee_name: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


def _name(user: Optional[User]) -> Optional[str]:
    return user.full_name if user is not None else None


class SwapService(BaseService):
    """Employee swap detection and execution."""

    def __init__(
        self,
        db: Session,
        capacity_checker: Optional[CapacityChecker] = None,
        booking_repository: Optional[BookingRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(
            db
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.capacity_checker = capacity_checker or CapacityChecker(
            db, booking_repository=self.booking_repository
        )

    def _load(self, booking_id: str, candidate_employee_id: str) -> tuple[Booking, User]:
        booking = self.booking_repository.get_with_details(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking {booking_id} not found", code="BOOKING_NOT_FOUND")
        candidate = self.user_repository.get_by_id(candidate_employee_id)
        if candidate is None:
            raise NotFoundException(
                f"Employee {candidate_employee_id} not found", code="EMPLOYEE_NOT_FOUND"
            )
        return booking, candidate

    def _conflicts(self, booking: Booking, candidate_employee_id: str) -> List[Booking]:
        return self.capacity_checker.overlapping_bookings(
            candidate_employee_id,
            booking.booking_date,
            booking.start_time,
            booking.end_time,
            exclude_booking_id=booking.id,
        )

    @BaseService.measure_operation("check_swap")
    def check_swap(self, booking_id: str, candidate_employee_id: str) -> SwapAssessment:
        """
        Check whether giving a booking to another employee needs a swap.

        Args:
            booking_id: Booking to reassign
            candidate_employee_id: Employee the admin wants to assign

        Returns:
            SwapAssessment; swap_needed is False when the candidate is free
            at that time. failed_rule is "category", "location" or "capacity"
            when a swap is needed but impossible.

        Raises:
            NotFoundException: If the booking or the employee does not exist
        """
        booking, candidate = self._load(booking_id, candidate_employee_id)

        conflicts = self._conflicts(booking, candidate.id)
        if not conflicts:
            return SwapAssessment(swap_needed=False, can_swap=False, reason=NO_CONFLICT_REASON)

        conflicting = conflicts[0]
        activity = booking.activity
        details = dict(
            conflicting_booking_id=conflicting.id,
            conflicting_booking_activity=conflicting.activity.name,
            current_employee_name=_name(booking.employee),
            new_employee_name=candidate.full_name,
            location=activity.location,
            category=activity.category.name if activity.category else None,
            start_time=booking.start_time,
            end_time=booking.end_time,
        )

        compatible, failed_rule = activities_compatible(activity, conflicting.activity)
        if not compatible:
            return SwapAssessment(
                swap_needed=True,
                can_swap=False,
                reason=_INCOMPATIBLE_REASONS[failed_rule],
                failed_rule=failed_rule,
                **details,
            )

        current_can_absorb = booking.employee_id is not None and (
            self.capacity_checker.can_employee_handle(
                booking.employee_id,
                conflicting.booking_date,
                conflicting.start_time,
                conflicting.end_time,
                conflicting.activity,
                conflicting.number_of_participants,
                exclude_booking_id=conflicting.id,
            )
        )
        if not current_can_absorb:
            return SwapAssessment(
                swap_needed=True,
                can_swap=False,
                reason="Current employee cannot handle the conflicting booking due to capacity",
                failed_rule=FAILED_RULE_CAPACITY,
                **details,
            )

        return SwapAssessment(swap_needed=True, can_swap=True, **details)

    @BaseService.measure_operation("swap_employees")
    def swap(self, booking1_id: str, booking2_id: str) -> tuple[Booking, Booking]:
        """
        Exchange the assigned employees of two bookings.

        Both rows are locked for the duration of the transaction. Callers are
        expected to have checked capacity first; category and location are
        re-checked here and a mismatch is an error.

        Raises:
            NotFoundException: If either booking does not exist
            IncompatibleSwapException: If the activities differ in category or location
        """
        with self.transaction():
            # Lock in a fixed order so two concurrent swaps cannot deadlock.
            locked = {}
            for booking_id in sorted({booking1_id, booking2_id}):
                row = self.booking_repository.get_for_update(booking_id)
                if row is None:
                    raise NotFoundException(
                        f"Booking {booking_id} not found", code="BOOKING_NOT_FOUND"
                    )
                locked[booking_id] = row
            first, second = locked[booking1_id], locked[booking2_id]

            compatible, failed_rule = activities_compatible(first.activity, second.activity)
            if not compatible:
                prometheus_metrics.inc_employee_swap("rejected")
                raise IncompatibleSwapException(
                    f"Bookings cannot swap employees: different {failed_rule}",
                    failed_rule=failed_rule,
                    details={"booking1_id": booking1_id, "booking2_id": booking2_id},
                )

            first.employee_id, second.employee_id = second.employee_id, first.employee_id
            self.db.flush()

        prometheus_metrics.inc_employee_swap("swapped")
        self.logger.info(f"Swapped employees between bookings {booking1_id} and {booking2_id}")
        self.db.refresh(first)
        self.db.refresh(second)
        return first, second

    @BaseService.measure_operation("swap_options")
    def swap_options(self, booking_id: str, candidate_employee_id: str) -> SwapOptions:
        """
        List the candidate employee's bookings that could be traded for this one.

        A conflicting booking qualifies when both activities share category
        and location and the trade works both ways: the current employee can
        take the conflicting booking once the original is off their schedule,
        and the candidate can take the original once the conflicting booking
        is off theirs.

        Raises:
            NotFoundException: If the booking or the employee does not exist
        """
        booking, candidate = self._load(booking_id, candidate_employee_id)

        conflicts = self._conflicts(booking, candidate.id)
        if not conflicts:
            return SwapOptions(
                has_compatible_bookings=False,
                reason="No conflicting bookings - direct assignment possible",
            )

        activity = booking.activity
        compatible: List[CompatibleBooking] = []
        for other in conflicts:
            ok, failed_rule = activities_compatible(activity, other.activity)
            if not ok:
                self.logger.debug(f"Booking {other.id} incompatible: {failed_rule} mismatch")
                continue

            current_takes_other = booking.employee_id is not None and (
                self.capacity_checker.can_employee_handle(
                    booking.employee_id,
                    other.booking_date,
                    other.start_time,
                    other.end_time,
                    other.activity,
                    other.number_of_participants,
                    exclude_booking_id=booking.id,
                )
            )
            candidate_takes_original = self.capacity_checker.can_employee_handle(
                candidate.id,
                booking.booking_date,
                booking.start_time,
                booking.end_time,
                activity,
                booking.number_of_participants,
                exclude_booking_id=other.id,
            )
            if not (current_takes_other and candidate_takes_original):
                self.logger.debug(
                    f"Booking {other.id} rejected: current employee ok={current_takes_other}, "
                    f"candidate ok={candidate_takes_original}"
                )
                continue

            compatible.append(
                CompatibleBooking(
                    booking_id=other.id,
                    customer_name=other.customer_name,
                    is_guest_booking=other.is_guest_booking,
                    activity_name=other.activity.name,
                    number_of_participants=other.number_of_participants,
                    start_time=other.start_time,
                    end_time=other.end_time,
                    booking_date=other.booking_date,
                )
            )

        summary = dict(
            current_employee_name=_name(booking.employee),
            new_employee_name=candidate.full_name,
            location=activity.location,
            category=activity.category.name if activity.category else None,
            start_time=booking.start_time,
            end_time=booking.end_time,
        )
        if not compatible:
            return SwapOptions(
                has_compatible_bookings=False,
                reason=(
                    "No compatible bookings found - different categories, locations, or "
                    "capacity would be exceeded in one or both directions"
                ),
                **summary,
            )

        self.logger.info(
            f"Found {len(compatible)} compatible bookings for swap of booking {booking.id}"
        )
        return SwapOptions(has_compatible_bookings=True, compatible_bookings=compatible, **summary)
