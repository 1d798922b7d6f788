# backend/guidebook/schemas/booking.py
"""
Booking schemas for the Guidebook platform.

A booking request names the activity, the date, the start time and the
headcount; the end time and the employee are decided by the server.
"""

from datetime import date, datetime, time
import re
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.constants import MAX_GUEST_NAME_LENGTH, MAX_GUEST_PHONE_LENGTH, MAX_NOTES_LENGTH
from .base import Money, StandardizedModel, StrictRequestModel

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"{field_name} must be a YYYY-MM-DD date-only string")
        return candidate
    return value


class BookingCreate(StrictRequestModel):
    """Booking request from a registered customer."""

    activity_id: str = Field(..., description="Activity to book")
    booking_date: date = Field(..., description="Date of the booking")
    start_time: time = Field(..., description="Start time (HH:MM)")
    number_of_participants: int = Field(..., ge=1, description="Headcount")
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("booking_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        return _ensure_date_only(v, "booking_date")


class GuestBookingCreate(BookingCreate):
    """Booking request from a guest; contact details replace the account."""

    guest_name: str = Field(..., max_length=MAX_GUEST_NAME_LENGTH)
    guest_phone: str = Field(..., max_length=MAX_GUEST_PHONE_LENGTH)
    guest_email: Optional[str] = Field(None, max_length=100)


class BookingStatusUpdate(StrictRequestModel):
    status: str = Field(..., description="PENDING, CONFIRMED, COMPLETED or CANCELLED")


class BookingEmployeeUpdate(StrictRequestModel):
    employee_id: str


class TimeSlotResponse(StandardizedModel):
    start_time: time
    end_time: time
    available: bool


class AvailableDatesResponse(StandardizedModel):
    """
    Days of a month with at least one open slot.

    This is a coarse view; the per-day slot lookup is authoritative.
    """

    activity_id: str
    dates: List[date]


class BookingResponse(StandardizedModel):
    """Booking as returned by the API."""

    id: str
    activity_id: str
    user_id: Optional[str] = None
    employee_id: Optional[str] = None
    customer_name: Optional[str] = None
    is_guest_booking: bool
    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_email: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: time
    number_of_participants: int
    total_price: Money
    deposit_amount: Money
    paid_amount: Money
    remaining_amount: Money
    status: str
    payment_status: str
    notes: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    payment_deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CanPayResponse(StandardizedModel):
    booking_id: str
    can_accept_payment: bool
