# backend/guidebook/routes/v1/work_hours.py
"""
Work window routes - API v1

Endpoints:
    POST /{employee_id} - Add a work window
    POST /{employee_id}/bulk - Add the same window on several dates
    GET /{employee_id} - List windows in a date range
    PUT /entry/{window_id} - Move or resize a window
    DELETE /entry/{window_id} - Delete a window
    DELETE /{employee_id}/date/{work_date} - Delete all windows on a date
"""

import asyncio
from datetime import date
import logging
from typing import List

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ...api.dependencies import get_work_hour_service
from ...schemas.work_hour import (
    WorkWindowBulkCreate,
    WorkWindowCreate,
    WorkWindowResponse,
    WorkWindowsDeletedResponse,
    WorkWindowUpdate,
)
from ...services.work_hour_service import WorkHourService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["work-hours-v1"])


@router.delete("/entry/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work_window(
    window_id: str,
    work_hour_service: WorkHourService = Depends(get_work_hour_service),
) -> Response:
    await asyncio.to_thread(work_hour_service.delete_work_window, window_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/entry/{window_id}", response_model=WorkWindowResponse)
async def update_work_window(
    window_id: str,
    payload: WorkWindowUpdate = Body(...),
    work_hour_service: WorkHourService = Depends(get_work_hour_service),
) -> WorkWindowResponse:
    """Move or resize a window; 409 if the result overlaps another window."""
    window = await asyncio.to_thread(
        work_hour_service.update_work_window,
        window_id,
        payload.work_date,
        payload.start_time,
        payload.end_time,
        payload.is_available,
    )
    return WorkWindowResponse.model_validate(window)


@router.post(
    "/{employee_id}", response_model=WorkWindowResponse, status_code=status.HTTP_201_CREATED
)
async def add_work_window(
    employee_id: str,
    payload: WorkWindowCreate = Body(...),
    work_hour_service: WorkHourService = Depends(get_work_hour_service),
) -> WorkWindowResponse:
    window = await asyncio.to_thread(
        work_hour_service.add_work_window,
        employee_id,
        payload.work_date,
        payload.start_time,
        payload.end_time,
        payload.is_available,
    )
    return WorkWindowResponse.model_validate(window)


@router.post(
    "/{employee_id}/bulk",
    response_model=List[WorkWindowResponse],
    status_code=status.HTTP_201_CREATED,
)
async def bulk_add_work_windows(
    employee_id: str,
    payload: WorkWindowBulkCreate = Body(...),
    work_hour_service: WorkHourService = Depends(get_work_hour_service),
) -> List[WorkWindowResponse]:
    """All-or-nothing: one conflicting date rejects the batch with 409."""
    windows = await asyncio.to_thread(
        work_hour_service.bulk_add_work_windows,
        employee_id,
        payload.dates,
        payload.start_time,
        payload.end_time,
    )
    return [WorkWindowResponse.model_validate(w) for w in windows]


@router.get("/{employee_id}", response_model=List[WorkWindowResponse])
async def list_work_windows(
    employee_id: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    work_hour_service: WorkHourService = Depends(get_work_hour_service),
) -> List[WorkWindowResponse]:
    windows = await asyncio.to_thread(
        work_hour_service.list_work_windows, employee_id, start_date, end_date
    )
    return [WorkWindowResponse.model_validate(w) for w in windows]


@router.delete("/{employee_id}/date/{work_date}", response_model=WorkWindowsDeletedResponse)
async def delete_work_windows_for_date(
    employee_id: str,
    work_date: date,
    work_hour_service: WorkHourService = Depends(get_work_hour_service),
) -> WorkWindowsDeletedResponse:
    deleted = await asyncio.to_thread(
        work_hour_service.delete_work_windows_for_date, employee_id, work_date
    )
    return WorkWindowsDeletedResponse(deleted=deleted)
