# backend/guidebook/models/booking.py
"""
Booking model for the Guidebook platform.

A booking reserves an activity on a date for a time range and a number of
participants, and names the employee (guide) who runs it. Bookings hold ids
of the activity, customer and employee; availability is recomputed from
bookings and work windows on demand, nothing is pre-deducted.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.config import settings
from ..database import Base

logger = logging.getLogger(__name__)

IS_SQLITE = settings.get_database_url().startswith("sqlite")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    """Payment progress, tracked independently of the booking status."""

    UNPAID = "UNPAID"
    DEPOSIT_PAID = "DEPOSIT_PAID"
    FULLY_PAID = "FULLY_PAID"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"
    FULLY_REFUNDED = "FULLY_REFUNDED"


# Allowed lifecycle moves; COMPLETED and CANCELLED are terminal.
ALLOWED_STATUS_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


class Booking(Base):
    """
    Reservation of an activity time slot.

    Exactly one of user_id (registered customer) and guest_name (guest
    contact) is populated. end_time is start_time plus the activity duration
    at creation time.
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    activity_id = Column(String(26), ForeignKey("activities.id"), nullable=False)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    employee_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)

    # Guest contact (only for guest bookings)
    guest_name = Column(String(100), nullable=True)
    guest_phone = Column(String(20), nullable=True)
    guest_email = Column(String(100), nullable=True)

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    number_of_participants = Column(Integer, nullable=False)

    # Money
    total_price = Column(Numeric(10, 2), nullable=False)
    deposit_amount = Column(Numeric(10, 2), nullable=False)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    remaining_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    payment_status = Column(String(30), nullable=False, default=PaymentStatus.UNPAID.value)
    notes = Column(Text, nullable=True)

    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    payment_deadline = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Forward references only
    activity = relationship("Activity", lazy="joined")
    user = relationship("User", foreign_keys=[user_id])
    employee = relationship("User", foreign_keys=[employee_id])

    _table_constraints: list[Any] = [
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED')",
            name="ck_bookings_status",
        ),
        CheckConstraint(
            "(user_id IS NOT NULL AND guest_name IS NULL) "
            "OR (user_id IS NULL AND guest_name IS NOT NULL)",
            name="ck_bookings_customer_xor_guest",
        ),
        CheckConstraint("number_of_participants > 0", name="check_participants_positive"),
        CheckConstraint("total_price >= 0", name="check_total_price_non_negative"),
        Index("ix_bookings_employee_date", "employee_id", "booking_date"),
        Index("ix_bookings_activity_date", "activity_id", "booking_date"),
    ]

    if not IS_SQLITE:
        _table_constraints.append(
            CheckConstraint(
                "CASE "
                "WHEN end_time = '00:00:00' AND start_time <> '00:00:00' THEN TRUE "
                "ELSE start_time < end_time "
                "END",
                name="check_time_order",
            )
        )

    __table_args__ = tuple(_table_constraints)

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value
        if not self.payment_status:
            self.payment_status = PaymentStatus.UNPAID.value
        if self.paid_amount is None:
            self.paid_amount = Decimal("0.00")
        self.recalculate_remaining_amount()

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: activity={self.activity_id}, employee={self.employee_id}, "
            f"date={self.booking_date}, time={self.start_time}-{self.end_time}, "
            f"participants={self.number_of_participants}, status={self.status}>"
        )

    def recalculate_remaining_amount(self) -> None:
        if self.total_price is not None:
            self.remaining_amount = Decimal(self.total_price) - Decimal(self.paid_amount or 0)

    @property
    def is_guest_booking(self) -> bool:
        return self.user_id is None

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    @property
    def customer_name(self) -> Optional[str]:
        """Registered customer's full name, or the guest name."""
        if self.user is not None:
            return self.user.full_name
        return self.guest_name

    def cancel(self) -> None:
        """Cancel this booking."""
        self.status = BookingStatus.CANCELLED.value
        logger.info(f"Booking {self.id} cancelled")
