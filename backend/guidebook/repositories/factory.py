# backend/guidebook/repositories/factory.py
"""
Repository Factory for the Guidebook platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .activity_repository import ActivityRepository
    from .booking_repository import BookingRepository
    from .user_repository import UserRepository
    from .work_hour_repository import WorkHourRepository
    from .work_hour_request_repository import WorkHourRequestRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking queries."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_work_hour_repository(db: Session) -> "WorkHourRepository":
        """Create repository for employee work windows."""
        from .work_hour_repository import WorkHourRepository

        return WorkHourRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for users and the employee directory."""
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_activity_repository(db: Session) -> "ActivityRepository":
        """Create repository for the activity catalog."""
        from .activity_repository import ActivityRepository

        return ActivityRepository(db)

    @staticmethod
    def create_work_hour_request_repository(db: Session) -> "WorkHourRequestRepository":
        """Create repository for work hour requests."""
        from .work_hour_request_repository import WorkHourRequestRepository

        return WorkHourRequestRepository(db)
