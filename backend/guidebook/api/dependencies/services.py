# backend/guidebook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.booking_service import BookingService
from ...services.swap_service import SwapService
from ...services.work_hour_request_service import WorkHourRequestService
from ...services.work_hour_service import WorkHourService
from .database import get_db


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session

    Returns:
        BookingService instance
    """
    return BookingService(db)


def get_swap_service(db: Session = Depends(get_db)) -> SwapService:
    """Get employee swap service instance."""
    return SwapService(db)


def get_work_hour_service(db: Session = Depends(get_db)) -> WorkHourService:
    """Get work window service instance."""
    return WorkHourService(db)


def get_work_hour_request_service(db: Session = Depends(get_db)) -> WorkHourRequestService:
    """Get work hour request service instance."""
    return WorkHourRequestService(db)
