"""
Service layer for the Guidebook platform.

Engine services (capacity, assignment, slots, monthly availability, swaps)
are read-only except SwapService.swap; BookingService, WorkHourService and
WorkHourRequestService own the remaining writes.
"""

from .base import BaseService
from .booking_service import BookingService
from .capacity_checker import CapacityChecker, activities_compatible
from .employee_assignment_service import EmployeeAssignmentService
from .monthly_availability_service import MonthlyAvailabilityService
from .slot_service import SlotService, TimeSlot
from .swap_service import CompatibleBooking, SwapAssessment, SwapOptions, SwapService
from .work_hour_request_service import WorkHourRequestService
from .work_hour_service import WorkHourService

__all__ = [
    "BaseService",
    "BookingService",
    "CapacityChecker",
    "CompatibleBooking",
    "EmployeeAssignmentService",
    "MonthlyAvailabilityService",
    "SlotService",
    "SwapAssessment",
    "SwapOptions",
    "SwapService",
    "TimeSlot",
    "WorkHourRequestService",
    "WorkHourService",
    "activities_compatible",
]
