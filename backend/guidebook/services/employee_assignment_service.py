# backend/guidebook/services/employee_assignment_service.py
"""
Employee Assignment Service for the Guidebook platform

Finds a guide for a new booking request. Employees are tried in directory
order and the first one the capacity rule accepts wins; there is no
load-balancing between guides.
"""

from datetime import date, time
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..models.activity import Activity
from ..models.user import User
from ..repositories import RepositoryFactory
from ..repositories.user_repository import UserRepository
from .base import BaseService
from .capacity_checker import CapacityChecker

logger = logging.getLogger(__name__)


class EmployeeAssignmentService(BaseService):
    """Picks the employee for a booking request."""

    def __init__(
        self,
        db: Session,
        capacity_checker: Optional[CapacityChecker] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.capacity_checker = capacity_checker or CapacityChecker(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    def eligible_employees(self) -> List[User]:
        """Enabled users holding the employee role, in store order."""
        return self.user_repository.employees_with_role(RoleName.EMPLOYEE, enabled_only=True)

    def first_capable_employee(
        self,
        employees: List[User],
        booking_date: date,
        start_time: time,
        end_time: time,
        activity: Activity,
        participant_count: int,
    ) -> Optional[User]:
        for employee in employees:
            if self.capacity_checker.can_employee_handle(
                employee.id,
                booking_date,
                start_time,
                end_time,
                activity,
                participant_count,
                exclude_booking_id=None,
            ):
                return employee
        return None

    @BaseService.measure_operation("find_available_employee")
    def find_available_employee(
        self,
        booking_date: date,
        start_time: time,
        end_time: time,
        activity: Activity,
        participant_count: int,
    ) -> Optional[User]:
        """
        Find the first employee who can take the requested booking.

        Args:
            booking_date: Requested date
            start_time: Requested start
            end_time: Requested end
            activity: Activity being booked
            participant_count: Requested headcount

        Returns:
            The employee, or None when nobody qualifies. None is a normal
            outcome, not an error.
        """
        employee = self.first_capable_employee(
            self.eligible_employees(),
            booking_date,
            start_time,
            end_time,
            activity,
            participant_count,
        )
        if employee is None:
            self.logger.info(
                f"No employee available for activity {activity.id} on {booking_date} "
                f"{start_time}-{end_time} ({participant_count} participants)"
            )
        else:
            self.logger.debug(f"Employee {employee.username} can take activity {activity.id}")
        return employee
