# backend/guidebook/services/work_hour_service.py
"""
Work Hour Service for the Guidebook platform

Admin management of employee work windows. Windows of one employee on one
date must never overlap; a window identical to an existing one counts as an
overlap.
"""

from datetime import date, time
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    AvailabilityOverlapException,
    NotFoundException,
    ValidationException,
)
from ..models.user import User
from ..models.work_hour import EmployeeWorkHour
from ..repositories import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..repositories.work_hour_repository import WorkHourRepository
from ..utils.time_utils import is_valid_range, overlaps
from .base import BaseService

logger = logging.getLogger(__name__)


def _fmt(start: time, end: time) -> str:
    return f"{start.strftime('%H:%M')}-{end.strftime('%H:%M')}"


class WorkHourService(BaseService):
    """Creates, edits, lists and deletes employee work windows."""

    def __init__(
        self,
        db: Session,
        work_hour_repository: Optional[WorkHourRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.work_hour_repository = (
            work_hour_repository or RepositoryFactory.create_work_hour_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    def _get_employee(self, employee_id: str) -> User:
        employee = self.user_repository.get_by_id(employee_id)
        if employee is None:
            raise NotFoundException(f"Employee {employee_id} not found", code="EMPLOYEE_NOT_FOUND")
        return employee

    def validate_window(
        self,
        employee_id: str,
        work_date: date,
        start: time,
        end: time,
        exclude_window_id: Optional[str] = None,
    ) -> None:
        """
        Check a window's time range and that it overlaps none of the employee's
        windows on that date.

        Raises:
            ValidationException: If the range is empty or reversed
            AvailabilityOverlapException: If it overlaps or duplicates a window
        """
        if not is_valid_range(start, end):
            raise ValidationException(
                "Work window start must be before its end", code="INVALID_TIME_RANGE"
            )

        for existing in self.work_hour_repository.all_for_employee_and_date(employee_id, work_date):
            if existing.id == exclude_window_id:
                continue
            if overlaps(start, end, existing.start_time, existing.end_time):
                raise AvailabilityOverlapException(
                    specific_date=work_date.isoformat(),
                    new_range=_fmt(start, end),
                    conflicting_range=_fmt(existing.start_time, existing.end_time),
                )

    def create_window(
        self, employee_id: str, work_date: date, start: time, end: time, is_available: bool
    ) -> EmployeeWorkHour:
        """Validate and insert a window inside the caller's transaction."""
        self.validate_window(employee_id, work_date, start, end)
        return self.work_hour_repository.create(
            employee_id=employee_id,
            work_date=work_date,
            start_time=start,
            end_time=end,
            is_available=is_available,
        )

    @BaseService.measure_operation("add_work_window")
    def add_work_window(
        self,
        employee_id: str,
        work_date: date,
        start_time: time,
        end_time: time,
        is_available: bool = True,
    ) -> EmployeeWorkHour:
        """
        Add one work window.

        Raises:
            NotFoundException: If the employee does not exist
            ValidationException: If the time range is empty or reversed
            AvailabilityOverlapException: If it overlaps or duplicates an existing window
        """
        employee = self._get_employee(employee_id)
        with self.transaction():
            window = self.create_window(employee.id, work_date, start_time, end_time, is_available)

        self.logger.info(
            f"Work window {_fmt(start_time, end_time)} added for {employee.username} on {work_date}"
        )
        return window

    @BaseService.measure_operation("bulk_add_work_windows")
    def bulk_add_work_windows(
        self,
        employee_id: str,
        dates: Iterable[date],
        start_time: time,
        end_time: time,
        is_available: bool = True,
    ) -> List[EmployeeWorkHour]:
        """
        Add the same window on several dates.

        All-or-nothing: one overlapping date rejects the whole batch.
        """
        employee = self._get_employee(employee_id)
        with self.transaction():
            windows = [
                self.create_window(employee.id, work_date, start_time, end_time, is_available)
                for work_date in dates
            ]

        self.logger.info(f"{len(windows)} work windows added for {employee.username}")
        return windows

    def list_work_windows(
        self, employee_id: str, start_date: date, end_date: date
    ) -> List[EmployeeWorkHour]:
        """Available windows of an employee between two dates (inclusive)."""
        self._get_employee(employee_id)
        if end_date < start_date:
            raise ValidationException("end_date must not be before start_date")
        return self.work_hour_repository.windows_for_employee_and_date_range(
            employee_id, start_date, end_date
        )

    @BaseService.measure_operation("delete_work_window")
    def delete_work_window(self, window_id: str) -> None:
        """
        Delete a work window.

        Existing bookings are left untouched.
        """
        with self.transaction():
            if not self.work_hour_repository.delete(window_id):
                raise NotFoundException(
                    f"Work window {window_id} not found", code="WORK_WINDOW_NOT_FOUND"
                )
        self.logger.info(f"Work window {window_id} deleted")

    @BaseService.measure_operation("update_work_window")
    def update_work_window(
        self,
        window_id: str,
        work_date: date,
        start_time: time,
        end_time: time,
        is_available: bool = True,
    ) -> EmployeeWorkHour:
        """
        Move or resize a work window.

        The window is checked against the employee's other windows on the
        target date; existing bookings are left untouched.
        """
        with self.transaction():
            window = self.work_hour_repository.get_for_update(window_id)
            if window is None:
                raise NotFoundException(
                    f"Work window {window_id} not found", code="WORK_WINDOW_NOT_FOUND"
                )
            self.validate_window(
                window.employee_id, work_date, start_time, end_time, exclude_window_id=window.id
            )
            updated = self.work_hour_repository.update(
                window.id,
                work_date=work_date,
                start_time=start_time,
                end_time=end_time,
                is_available=is_available,
            )

        self.logger.info(
            f"Work window {window_id} moved to {work_date} {_fmt(start_time, end_time)}"
        )
        return updated

    @BaseService.measure_operation("delete_work_windows_for_date")
    def delete_work_windows_for_date(self, employee_id: str, work_date: date) -> int:
        """Delete all of an employee's windows on a date; returns how many went."""
        employee = self._get_employee(employee_id)
        with self.transaction():
            deleted = self.work_hour_repository.delete_for_employee_and_date(
                employee.id, work_date
            )
        self.logger.info(f"{deleted} work windows deleted for {employee.username} on {work_date}")
        return deleted
