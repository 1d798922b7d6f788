# backend/guidebook/schemas/work_hour.py
"""Employee work window and work hour request schemas."""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.constants import MAX_NOTES_LENGTH
from ..utils.time_utils import is_valid_range
from .base import StandardizedModel, StrictRequestModel


def _ensure_range(start: time, end: time) -> None:
    if not is_valid_range(start, end):
        raise ValueError("start_time must be before end_time (00:00 ends at midnight)")


class WorkWindowCreate(StrictRequestModel):
    work_date: date
    start_time: time
    end_time: time
    is_available: bool = True

    @model_validator(mode="after")
    def _check_order(self) -> "WorkWindowCreate":
        _ensure_range(self.start_time, self.end_time)
        return self


class WorkWindowUpdate(WorkWindowCreate):
    """Full replacement of a window's date, times and availability."""


class WorkWindowBulkCreate(StrictRequestModel):
    """Same window on several dates, created all-or-nothing."""

    dates: List[date] = Field(..., min_length=1)
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def _check_order(self) -> "WorkWindowBulkCreate":
        _ensure_range(self.start_time, self.end_time)
        return self


class WorkWindowResponse(StandardizedModel):
    id: str
    employee_id: str
    work_date: date
    start_time: time
    end_time: time
    is_available: bool


class WorkWindowsDeletedResponse(StandardizedModel):
    deleted: int


# Work hour requests


class WorkHourRequestCreate(WorkWindowCreate):
    """An employee asking for a window; it exists only once approved."""

    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)


class WorkHourRequestBulkCreate(WorkWindowBulkCreate):
    is_available: bool = True
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)


class WorkHourRequestReject(StrictRequestModel):
    reason: str = Field(..., min_length=1, max_length=500)


class WorkHourRequestResponse(StandardizedModel):
    id: str
    employee_id: str
    employee_name: str
    work_date: date
    start_time: time
    end_time: time
    is_available: bool
    status: str
    notes: Optional[str] = None
    requested_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by_id: Optional[str] = None
    reviewed_by_name: Optional[str] = None
    rejection_reason: Optional[str] = None
