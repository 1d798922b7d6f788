# backend/guidebook/routes/v1/employee_swaps.py
"""
Employee swap routes - API v1

Admin tooling for reassigning guides between conflicting bookings.

Endpoints:
    GET /check - Does giving a booking to an employee need a swap?
    GET /options - Which of the employee's bookings could be traded
    POST / - Exchange the employees of two bookings
"""

import asyncio
import logging

from fastapi import APIRouter, Body, Depends, Query

from ...api.dependencies import get_swap_service
from ...schemas.booking import BookingResponse
from ...schemas.swap import (
    SwapAssessmentResponse,
    SwapOptionsResponse,
    SwapRequest,
    SwapResultResponse,
)
from ...services.swap_service import SwapService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["employee-swaps-v1"])


@router.get("/check", response_model=SwapAssessmentResponse)
async def check_swap(
    booking_id: str = Query(...),
    employee_id: str = Query(...),
    swap_service: SwapService = Depends(get_swap_service),
) -> SwapAssessmentResponse:
    assessment = await asyncio.to_thread(swap_service.check_swap, booking_id, employee_id)
    return SwapAssessmentResponse.model_validate(assessment)


@router.get("/options", response_model=SwapOptionsResponse)
async def swap_options(
    booking_id: str = Query(...),
    employee_id: str = Query(...),
    swap_service: SwapService = Depends(get_swap_service),
) -> SwapOptionsResponse:
    options = await asyncio.to_thread(swap_service.swap_options, booking_id, employee_id)
    return SwapOptionsResponse.model_validate(options)


@router.post("", response_model=SwapResultResponse)
async def swap_employees(
    payload: SwapRequest = Body(...),
    swap_service: SwapService = Depends(get_swap_service),
) -> SwapResultResponse:
    """Exchange employees; 422 with failed_rule when the activities are incompatible."""
    first, second = await asyncio.to_thread(
        swap_service.swap, payload.booking1_id, payload.booking2_id
    )
    return SwapResultResponse(
        message="Employees swapped successfully",
        bookings=[BookingResponse.model_validate(first), BookingResponse.model_validate(second)],
    )
