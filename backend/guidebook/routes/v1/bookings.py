# backend/guidebook/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService; domain exceptions are turned
into problem responses by the app-level handlers.

Endpoints:
    GET /available-slots - Slot grid of an activity for one day
    GET /available-dates - Days of a month with any open slot
    GET /my-bookings - Bookings of the calling customer (X-User-Id header)
    GET / - All bookings, optionally filtered by status
    POST / - Create a booking for a registered customer (X-User-Id header)
    POST /guest - Create a guest booking
    GET /{booking_id} - Booking details
    PUT /{booking_id}/status - Change lifecycle status
    PUT /{booking_id}/employee - Reassign the employee
    DELETE /{booking_id} - Cancel a booking
    GET /{booking_id}/can-pay - Whether a payment may be taken
"""

import asyncio
from datetime import date
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Header, Query, status

from ...api.dependencies import get_booking_service
from ...schemas.booking import (
    AvailableDatesResponse,
    BookingCreate,
    BookingEmployeeUpdate,
    BookingResponse,
    BookingStatusUpdate,
    CanPayResponse,
    GuestBookingCreate,
    TimeSlotResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("/available-slots", response_model=List[TimeSlotResponse])
async def get_available_slots(
    activity_id: str = Query(...),
    slot_date: date = Query(..., alias="date"),
    participants: Optional[int] = Query(None),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[TimeSlotResponse]:
    """Every candidate slot of the day, flagged available or not."""
    slots = await asyncio.to_thread(
        booking_service.get_available_time_slots, activity_id, slot_date, participants
    )
    return [TimeSlotResponse.model_validate(slot) for slot in slots]


@router.get("/available-dates", response_model=AvailableDatesResponse)
async def get_available_dates(
    activity_id: str = Query(...),
    reference_date: date = Query(..., alias="date"),
    participants: Optional[int] = Query(None),
    booking_service: BookingService = Depends(get_booking_service),
) -> AvailableDatesResponse:
    """
    Days of the month containing `date` with at least one open slot.

    Coarse view: a listed day may still have no bookable slot for a given
    headcount once capacity sharing is applied.
    """
    dates = await asyncio.to_thread(
        booking_service.get_available_dates_for_month, activity_id, reference_date, participants
    )
    return AvailableDatesResponse(activity_id=activity_id, dates=dates)


@router.get("/my-bookings", response_model=List[BookingResponse])
async def get_my_bookings(
    user_id: str = Header(..., alias="X-User-Id"),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """Bookings of the customer named by the X-User-Id header."""
    bookings = await asyncio.to_thread(booking_service.get_user_bookings, user_id)
    return [BookingResponse.model_validate(b) for b in bookings]


# ============================================================================
# SECTION 2: Root routes
# ============================================================================


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    booking_status: Optional[str] = Query(None, alias="status"),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """All bookings, optionally narrowed to one status."""
    bookings = await asyncio.to_thread(booking_service.get_all_bookings, booking_status)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Customer or activity not found"},
        409: {"description": "Slot taken by a concurrent booking"},
        422: {"description": "No employee available"},
    },
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    user_id: str = Header(..., alias="X-User-Id"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Create a booking for the customer named by the X-User-Id header."""
    booking = await asyncio.to_thread(booking_service.create_booking, booking_data, user_id)
    return BookingResponse.model_validate(booking)


@router.post("/guest", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_guest_booking(
    booking_data: GuestBookingCreate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(booking_service.create_guest_booking, booking_data)
    return BookingResponse.model_validate(booking)


# ============================================================================
# SECTION 3: Routes with path parameters
# ============================================================================


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(booking_service.get_booking, booking_id)
    return BookingResponse.model_validate(booking)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(
        booking_service.update_booking_status, booking_id, payload.status
    )
    return BookingResponse.model_validate(booking)


@router.put("/{booking_id}/employee", response_model=BookingResponse)
async def reassign_employee(
    booking_id: str,
    payload: BookingEmployeeUpdate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Assign another employee; they must have capacity for the booking."""
    booking = await asyncio.to_thread(
        booking_service.reassign_employee, booking_id, payload.employee_id
    )
    return BookingResponse.model_validate(booking)


@router.delete("/{booking_id}", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(booking_service.cancel_booking, booking_id)
    return BookingResponse.model_validate(booking)


@router.get("/{booking_id}/can-pay", response_model=CanPayResponse)
async def can_accept_payment(
    booking_id: str,
    booking_service: BookingService = Depends(get_booking_service),
) -> CanPayResponse:
    allowed = await asyncio.to_thread(booking_service.can_accept_payment, booking_id)
    return CanPayResponse(booking_id=booking_id, can_accept_payment=allowed)
