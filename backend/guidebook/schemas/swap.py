# backend/guidebook/schemas/swap.py
"""Employee swap schemas."""

from datetime import date, time
from typing import List, Optional

from pydantic import Field

from .base import StandardizedModel, StrictRequestModel
from .booking import BookingResponse


class SwapAssessmentResponse(StandardizedModel):
    swap_needed: bool
    can_swap: bool
    reason: Optional[str] = None
    failed_rule: Optional[str] = Field(None, description="category, location or capacity")
    conflicting_booking_id: Optional[str] = None
    conflicting_booking_activity: Optional[str] = None
    current_employee_name: Optional[str] = None
    new_employee_name: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


class CompatibleBookingResponse(StandardizedModel):
    booking_id: str
    customer_name: Optional[str] = None
    is_guest_booking: bool
    activity_name: str
    number_of_participants: int
    start_time: time
    end_time: time
    booking_date: date


class SwapOptionsResponse(StandardizedModel):
    has_compatible_bookings: bool
    compatible_bookings: List[CompatibleBookingResponse] = Field(default_factory=list)
    reason: Optional[str] = None
    current_employee_name: Optional[str] = None
    new_employee_name: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


class SwapRequest(StrictRequestModel):
    booking1_id: str
    booking2_id: str


class SwapResultResponse(StandardizedModel):
    message: str
    bookings: List[BookingResponse]
