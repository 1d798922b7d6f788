# backend/guidebook/routes/v1/work_hour_requests.py
"""
Work hour request routes - API v1

Employees file requests with their id in the X-User-Id header; admins
review them the same way.

Endpoints:
    GET /mine - Requests of the calling employee
    GET /pending - Review queue
    GET / - All requests, optionally filtered by status
    POST / - File a request for one date
    POST /bulk - File the same window on several dates
    DELETE /{request_id} - Withdraw a pending request (owner only)
    PUT /{request_id}/approve - Approve and create the window (admin)
    PUT /{request_id}/reject - Reject with a reason (admin)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Header, Query, Response, status

from ...api.dependencies import get_work_hour_request_service
from ...schemas.work_hour import (
    WorkHourRequestBulkCreate,
    WorkHourRequestCreate,
    WorkHourRequestReject,
    WorkHourRequestResponse,
)
from ...services.work_hour_request_service import WorkHourRequestService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["work-hour-requests-v1"])


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("/mine", response_model=List[WorkHourRequestResponse])
async def list_my_requests(
    user_id: str = Header(..., alias="X-User-Id"),
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> List[WorkHourRequestResponse]:
    requests = await asyncio.to_thread(request_service.list_my_requests, user_id)
    return [WorkHourRequestResponse.model_validate(r) for r in requests]


@router.get("/pending", response_model=List[WorkHourRequestResponse])
async def list_pending_requests(
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> List[WorkHourRequestResponse]:
    requests = await asyncio.to_thread(request_service.list_pending_requests)
    return [WorkHourRequestResponse.model_validate(r) for r in requests]


@router.post(
    "/bulk",
    response_model=List[WorkHourRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_bulk_request(
    payload: WorkHourRequestBulkCreate = Body(...),
    user_id: str = Header(..., alias="X-User-Id"),
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> List[WorkHourRequestResponse]:
    """Past dates are skipped; one overlapping date rejects the batch with 409."""
    requests = await asyncio.to_thread(
        request_service.create_bulk_request,
        user_id,
        payload.dates,
        payload.start_time,
        payload.end_time,
        payload.is_available,
        payload.notes,
    )
    return [WorkHourRequestResponse.model_validate(r) for r in requests]


# ============================================================================
# SECTION 2: Root routes
# ============================================================================


@router.get("", response_model=List[WorkHourRequestResponse])
async def list_requests(
    request_status: Optional[str] = Query(None, alias="status"),
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> List[WorkHourRequestResponse]:
    requests = await asyncio.to_thread(request_service.list_requests, request_status)
    return [WorkHourRequestResponse.model_validate(r) for r in requests]


@router.post("", response_model=WorkHourRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: WorkHourRequestCreate = Body(...),
    user_id: str = Header(..., alias="X-User-Id"),
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> WorkHourRequestResponse:
    request = await asyncio.to_thread(
        request_service.create_request,
        user_id,
        payload.work_date,
        payload.start_time,
        payload.end_time,
        payload.is_available,
        payload.notes,
    )
    return WorkHourRequestResponse.model_validate(request)


# ============================================================================
# SECTION 3: Routes with path parameters
# ============================================================================


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_request(
    request_id: str,
    user_id: str = Header(..., alias="X-User-Id"),
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> Response:
    await asyncio.to_thread(request_service.cancel_request, request_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{request_id}/approve", response_model=WorkHourRequestResponse)
async def approve_request(
    request_id: str,
    user_id: str = Header(..., alias="X-User-Id"),
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> WorkHourRequestResponse:
    """409 if the window now overlaps one added since the request was filed."""
    request = await asyncio.to_thread(request_service.approve_request, request_id, user_id)
    return WorkHourRequestResponse.model_validate(request)


@router.put("/{request_id}/reject", response_model=WorkHourRequestResponse)
async def reject_request(
    request_id: str,
    payload: WorkHourRequestReject = Body(...),
    user_id: str = Header(..., alias="X-User-Id"),
    request_service: WorkHourRequestService = Depends(get_work_hour_request_service),
) -> WorkHourRequestResponse:
    request = await asyncio.to_thread(
        request_service.reject_request, request_id, user_id, payload.reason
    )
    return WorkHourRequestResponse.model_validate(request)
