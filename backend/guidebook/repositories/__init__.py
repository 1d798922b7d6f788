# backend/guidebook/repositories/__init__.py
"""
Repository layer for the Guidebook platform.

Repositories own all queries; services own transactions.
"""

from .activity_repository import ActivityRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .user_repository import UserRepository
from .work_hour_repository import WorkHourRepository
from .work_hour_request_repository import WorkHourRequestRepository

__all__ = [
    "ActivityRepository",
    "BaseRepository",
    "BookingRepository",
    "IRepository",
    "RepositoryFactory",
    "UserRepository",
    "WorkHourRepository",
    "WorkHourRequestRepository",
]
