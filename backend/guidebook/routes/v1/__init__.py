# backend/guidebook/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import bookings, employee_swaps, work_hour_requests, work_hours

__all__ = [
    "bookings",
    "employee_swaps",
    "work_hour_requests",
    "work_hours",
]
