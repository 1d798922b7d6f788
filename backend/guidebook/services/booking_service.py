# backend/guidebook/services/booking_service.py
"""
Booking Service for the Guidebook platform

Handles the booking lifecycle:
- Slot and calendar lookups for an activity
- Booking creation for registered customers and guests, with employee
  assignment and pricing
- Status changes, employee reassignment and cancellation
- Payment eligibility and the expired-deadline sweep

Creation is a read-decide-write sequence. It runs in one transaction that
locks the chosen employee row and re-checks capacity under the lock; losing
a race to a concurrent writer restarts the sequence a bounded number of
times.
"""

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    BusinessRuleException,
    ConcurrencyConflictException,
    InvalidCapacityException,
    NoEmployeeAvailableException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.activity import Activity
from ..models.booking import (
    ALLOWED_STATUS_TRANSITIONS,
    Booking,
    BookingStatus,
    PaymentStatus,
)
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.activity_repository import ActivityRepository
from ..repositories.booking_repository import BookingRepository
from ..repositories.user_repository import UserRepository
from ..schemas.booking import BookingCreate, GuestBookingCreate
from ..utils.time_utils import add_minutes
from .base import BaseService
from .capacity_checker import CapacityChecker
from .employee_assignment_service import EmployeeAssignmentService
from .monthly_availability_service import MonthlyAvailabilityService
from .slot_service import SlotService, TimeSlot

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class _CapacityRaceLost(Exception):
    """The employee's schedule changed between the decision and the lock."""


def calculate_pricing(activity: Activity, participants: int) -> tuple[Decimal, Decimal]:
    """
    Total and deposit for a booking.

    total = price per person * participants
    deposit = total * deposit percent / 100, rounded half-up to cents
    """
    total = (Decimal(activity.price_per_person) * participants).quantize(CENTS, ROUND_HALF_UP)
    percent = Decimal(activity.deposit_percent or 0)
    deposit = (total * percent / Decimal(100)).quantize(CENTS, ROUND_HALF_UP)
    return total, deposit


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Delegates scheduling decisions to the engine services and owns every
    booking mutation.
    """

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        activity_repository: Optional[ActivityRepository] = None,
        user_repository: Optional[UserRepository] = None,
        capacity_checker: Optional[CapacityChecker] = None,
        assignment_service: Optional[EmployeeAssignmentService] = None,
        slot_service: Optional[SlotService] = None,
        monthly_service: Optional[MonthlyAvailabilityService] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(
            db
        )
        self.activity_repository = (
            activity_repository or RepositoryFactory.create_activity_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.capacity_checker = capacity_checker or CapacityChecker(
            db, booking_repository=self.booking_repository
        )
        self.assignment_service = assignment_service or EmployeeAssignmentService(
            db, capacity_checker=self.capacity_checker, user_repository=self.user_repository
        )
        self.slot_service = slot_service or SlotService(db, assignment_service=self.assignment_service)
        self.monthly_service = monthly_service or MonthlyAvailabilityService(
            db, booking_repository=self.booking_repository
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_activity(self, activity_id: str) -> Activity:
        activity = self.activity_repository.get_by_id(activity_id)
        if activity is None:
            raise NotFoundException(f"Activity {activity_id} not found", code="ACTIVITY_NOT_FOUND")
        return activity

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_with_details(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking {booking_id} not found", code="BOOKING_NOT_FOUND")
        return booking

    def get_booking(self, booking_id: str) -> Booking:
        """
        Get a booking with its activity, customer and employee.

        Raises:
            NotFoundException: If the booking does not exist
        """
        return self._get_booking(booking_id)

    def get_user_bookings(self, user_id: str) -> List[Booking]:
        """
        A customer's own bookings, cancelled ones included.

        Raises:
            NotFoundException: If the user does not exist
        """
        if self.user_repository.get_by_id(user_id) is None:
            raise NotFoundException(f"User {user_id} not found", code="USER_NOT_FOUND")
        return self.booking_repository.for_user(user_id)

    def get_all_bookings(self, status: Optional[str] = None) -> List[Booking]:
        """Every booking for the admin list, optionally filtered by status."""
        if status is None:
            return self.booking_repository.all_bookings()
        try:
            wanted = BookingStatus(status.strip().upper())
        except ValueError:
            raise ValidationException(f"Invalid status: {status}", code="INVALID_STATUS")
        return self.booking_repository.all_bookings(wanted)

    @BaseService.measure_operation("get_available_time_slots")
    def get_available_time_slots(
        self, activity_id: str, slot_date: date, participants: Optional[int] = None
    ) -> List[TimeSlot]:
        """Slot grid of an activity for one day."""
        activity = self._get_activity(activity_id)
        return self.slot_service.available_slots(activity, slot_date, participants)

    @BaseService.measure_operation("get_available_dates_for_month")
    def get_available_dates_for_month(
        self, activity_id: str, reference_date: date, participants: Optional[int] = None
    ) -> List[date]:
        """
        Days of the month with any open slot.

        Coarser than get_available_time_slots; see MonthlyAvailabilityService.
        """
        activity = self._get_activity(activity_id)
        return self.monthly_service.available_dates(activity, reference_date, participants)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _validate_participants(self, activity: Activity, participants: int) -> None:
        if not activity.min_participants <= participants <= activity.max_participants:
            raise InvalidCapacityException(
                participants, activity.min_participants, activity.max_participants
            )

    def _end_time(self, activity: Activity, start_time: time) -> time:
        try:
            return add_minutes(start_time, activity.duration_minutes)
        except ValueError:
            raise ValidationException(
                f"Activity of {activity.duration_minutes} minutes starting at {start_time} "
                "would run past midnight",
                code="INVALID_TIME_RANGE",
            )

    @BaseService.measure_operation("create_booking")
    def create_booking(self, booking_data: BookingCreate, user_id: str) -> Booking:
        """
        Create a booking for a registered customer.

        Args:
            booking_data: Activity, date, start time, headcount and notes
            user_id: The acting customer

        Returns:
            The new PENDING booking with an employee assigned

        Raises:
            NotFoundException: If the customer or activity does not exist
            InvalidCapacityException: If the headcount is outside the activity bounds
            NoEmployeeAvailableException: If no employee can take the slot
            ConcurrencyConflictException: If concurrent bookings kept taking the slot
        """
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundException(f"User {user_id} not found", code="USER_NOT_FOUND")

        booking = self._create(booking_data, user_id=user.id)
        self.logger.info(
            f"Booking created: id={booking.id}, employee={booking.employee_id}, "
            f"activity={booking.activity_id}, participants={booking.number_of_participants}"
        )
        return booking

    @BaseService.measure_operation("create_guest_booking")
    def create_guest_booking(self, booking_data: GuestBookingCreate) -> Booking:
        """
        Create a booking for a guest without an account.

        Guest name and phone are required.
        """
        if not (booking_data.guest_name or "").strip():
            raise ValidationException("Guest name is required", code="GUEST_NAME_REQUIRED")
        if not (booking_data.guest_phone or "").strip():
            raise ValidationException("Guest phone is required", code="GUEST_PHONE_REQUIRED")

        booking = self._create(
            booking_data,
            guest_name=booking_data.guest_name.strip(),
            guest_phone=booking_data.guest_phone.strip(),
            guest_email=booking_data.guest_email,
        )
        self.logger.info(
            f"Guest booking created: id={booking.id}, employee={booking.employee_id}, "
            f"activity={booking.activity_id}, participants={booking.number_of_participants}"
        )
        return booking

    def _create(self, booking_data: BookingCreate, **customer: Optional[str]) -> Booking:
        activity = self._get_activity(booking_data.activity_id)
        if not activity.is_active:
            raise BusinessRuleException(
                f"Activity {activity.id} is not bookable", code="ACTIVITY_INACTIVE"
            )

        participants = booking_data.number_of_participants
        self._validate_participants(activity, participants)
        end_time = self._end_time(activity, booking_data.start_time)
        total, deposit = calculate_pricing(activity, participants)

        max_attempts = settings.booking_conflict_retries + 1
        for attempt in range(1, max_attempts + 1):
            try:
                with self.transaction():
                    employee_id = self._assign_locked(
                        activity, booking_data.booking_date, booking_data.start_time, end_time,
                        participants,
                    )
                    booking = self.booking_repository.create(
                        activity_id=activity.id,
                        employee_id=employee_id,
                        booking_date=booking_data.booking_date,
                        start_time=booking_data.start_time,
                        end_time=end_time,
                        number_of_participants=participants,
                        total_price=total,
                        deposit_amount=deposit,
                        paid_amount=Decimal("0.00"),
                        status=BookingStatus.PENDING.value,
                        payment_status=PaymentStatus.UNPAID.value,
                        notes=booking_data.notes,
                        **customer,
                    )
                prometheus_metrics.inc_employee_assignment("assigned")
                return booking
            except _CapacityRaceLost:
                self.logger.warning(
                    f"Capacity changed while booking activity {activity.id} on "
                    f"{booking_data.booking_date} {booking_data.start_time} "
                    f"(attempt {attempt}/{max_attempts})"
                )

        prometheus_metrics.inc_employee_assignment("conflict")
        raise ConcurrencyConflictException(attempts=max_attempts)

    def _assign_locked(
        self,
        activity: Activity,
        booking_date: date,
        start_time: time,
        end_time: time,
        participants: int,
    ) -> str:
        """Pick an employee, lock their row and confirm the decision still holds."""
        employee = self.assignment_service.find_available_employee(
            booking_date, start_time, end_time, activity, participants
        )
        if employee is None:
            prometheus_metrics.inc_employee_assignment("no_employee")
            raise NoEmployeeAvailableException(
                details={
                    "activity_id": activity.id,
                    "date": booking_date.isoformat(),
                    "start_time": start_time.isoformat(),
                    "end_time": end_time.isoformat(),
                    "participants": participants,
                }
            )

        # Serializes writers on this employee until commit.
        self.user_repository.get_for_update(employee.id)
        if not self.capacity_checker.can_employee_handle(
            employee.id, booking_date, start_time, end_time, activity, participants
        ):
            raise _CapacityRaceLost()
        return str(employee.id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @BaseService.measure_operation("update_booking_status")
    def update_booking_status(self, booking_id: str, new_status: str) -> Booking:
        """
        Move a booking through its lifecycle.

        The first confirmation stamps confirmed_at and starts the payment
        deadline clock.

        Raises:
            NotFoundException: If the booking does not exist
            ValidationException: If the status is unknown
            BusinessRuleException: If the transition is not allowed
        """
        try:
            target = BookingStatus((new_status or "").strip().upper())
        except ValueError:
            raise ValidationException(f"Invalid status: {new_status}", code="INVALID_STATUS")

        with self.transaction():
            booking = self._get_booking(booking_id)
            current = BookingStatus(booking.status)
            if target not in ALLOWED_STATUS_TRANSITIONS[current]:
                raise BusinessRuleException(
                    f"Cannot change booking status from {current.value} to {target.value}",
                    code="INVALID_STATUS_TRANSITION",
                    details={"from": current.value, "to": target.value},
                )

            booking.status = target.value
            if target is BookingStatus.CONFIRMED and booking.confirmed_at is None:
                now = utc_now()
                booking.confirmed_at = now
                booking.payment_deadline = now + timedelta(hours=settings.payment_deadline_hours)
                self.logger.info(
                    f"Booking {booking_id} confirmed at {now}. "
                    f"Payment deadline: {booking.payment_deadline}"
                )
            self.db.flush()

        return booking

    @BaseService.measure_operation("reassign_employee")
    def reassign_employee(self, booking_id: str, employee_id: str) -> Booking:
        """
        Assign a different employee to a booking.

        The employee must hold the employee role and be able to take the
        booking on top of their own schedule.

        Raises:
            NotFoundException: If the booking or employee does not exist
            ValidationException: If the user is not an employee
            BusinessRuleException: If the booking is closed, or the employee is disabled or full
        """
        with self.transaction():
            booking = self._get_booking(booking_id)
            if booking.status in (BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value):
                raise BusinessRuleException(
                    f"Cannot reassign a {booking.status.lower()} booking", code="BOOKING_CLOSED"
                )

            employee = self.user_repository.get_for_update(employee_id)
            if employee is None:
                raise NotFoundException(
                    f"Employee {employee_id} not found", code="EMPLOYEE_NOT_FOUND"
                )
            if not employee.is_employee:
                raise ValidationException("User is not an employee", code="NOT_AN_EMPLOYEE")
            if not employee.is_active:
                raise BusinessRuleException(
                    f"Employee {employee_id} is disabled", code="EMPLOYEE_DISABLED"
                )

            if not self.capacity_checker.can_employee_handle(
                employee.id,
                booking.booking_date,
                booking.start_time,
                booking.end_time,
                booking.activity,
                booking.number_of_participants,
                exclude_booking_id=booking.id,
            ):
                raise BusinessRuleException(
                    "Employee cannot handle this booking due to capacity limits",
                    code="EMPLOYEE_CAPACITY_EXCEEDED",
                    details={"employee_id": employee.id, "booking_id": booking.id},
                )

            booking.employee_id = employee.id
            self.db.flush()

        self.db.refresh(booking)
        self.logger.info(f"Booking {booking_id} reassigned to employee {employee_id}")
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str) -> Booking:
        """
        Cancel a booking.

        Cancelling twice is a no-op; completed bookings cannot be cancelled.
        """
        with self.transaction():
            booking = self._get_booking(booking_id)
            if booking.status == BookingStatus.COMPLETED.value:
                raise BusinessRuleException(
                    "Completed bookings cannot be cancelled", code="BOOKING_COMPLETED"
                )
            if not booking.is_cancelled:
                booking.cancel()
                self.db.flush()
        return booking

    def can_accept_payment(self, booking_id: str, now: Optional[datetime] = None) -> bool:
        """
        Whether a payment may be taken for a booking.

        True for confirmed bookings that are not fully paid and whose
        payment deadline has not passed.
        """
        booking = self._get_booking(booking_id)
        if booking.status != BookingStatus.CONFIRMED.value:
            return False

        now = ensure_utc(now or utc_now())
        if booking.payment_deadline is not None and now > ensure_utc(booking.payment_deadline):
            return False

        return booking.payment_status != PaymentStatus.FULLY_PAID.value

    @BaseService.measure_operation("cancel_expired_bookings")
    def cancel_expired_bookings(self, now: Optional[datetime] = None) -> int:
        """
        Cancel confirmed, unpaid bookings whose payment deadline has passed.

        Returns:
            Number of bookings cancelled
        """
        now = ensure_utc(now or utc_now())
        with self.transaction():
            expired = self.booking_repository.find_expired_unpaid(now)
            for booking in expired:
                booking.cancel()
            self.db.flush()

        if expired:
            prometheus_metrics.inc_expired_bookings_cancelled(len(expired))
            self.log_operation("cancel_expired_bookings", cancelled=len(expired))
        return len(expired)
