"""
Database models for the Guidebook platform.

- User accounts and roles
- Activity catalog (categories and activities)
- Bookings
- Employee work windows and work hour requests
"""

from .activity import Activity, ActivityCategory
from .booking import Booking, BookingStatus, PaymentStatus
from .rbac import Role, user_roles
from .user import User
from .work_hour import EmployeeWorkHour
from .work_hour_request import WorkHourRequest, WorkHourRequestStatus

__all__ = [
    "Activity",
    "ActivityCategory",
    "Booking",
    "BookingStatus",
    "EmployeeWorkHour",
    "PaymentStatus",
    "Role",
    "User",
    "WorkHourRequest",
    "WorkHourRequestStatus",
    "user_roles",
]
