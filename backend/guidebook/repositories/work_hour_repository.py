# backend/guidebook/repositories/work_hour_repository.py
"""
Work Hour Repository for the Guidebook platform

Data access for employee work windows: per-day lookups for the scheduling
engine and range lookups for the monthly calendar and the admin screens.
Only windows flagged available count as availability.
"""

from datetime import date
import logging
from typing import List, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..models.work_hour import EmployeeWorkHour
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class WorkHourRepository(BaseRepository[EmployeeWorkHour]):
    """Repository for employee work windows."""

    def __init__(self, db: Session):
        super().__init__(db, EmployeeWorkHour)
        self.logger = logging.getLogger(__name__)

    def _available(self) -> Query:
        return self.db.query(EmployeeWorkHour).filter(EmployeeWorkHour.is_available.is_(True))

    def _run(self, query: Query, what: str) -> List[EmployeeWorkHour]:
        try:
            return cast(
                List[EmployeeWorkHour],
                query.order_by(
                    EmployeeWorkHour.work_date,
                    EmployeeWorkHour.start_time,
                    EmployeeWorkHour.id,
                ).all(),
            )
        except Exception as e:
            self.logger.error(f"Error getting work hours ({what}): {str(e)}")
            raise RepositoryException(f"Failed to get work hours: {str(e)}")

    def windows_for_date(self, work_date: date) -> List[EmployeeWorkHour]:
        """All available windows on a date, across employees."""
        return self._run(
            self._available().filter(EmployeeWorkHour.work_date == work_date), "date"
        )

    def windows_for_employee_and_date(
        self, employee_id: str, work_date: date
    ) -> List[EmployeeWorkHour]:
        return self._run(
            self._available().filter(
                EmployeeWorkHour.employee_id == employee_id,
                EmployeeWorkHour.work_date == work_date,
            ),
            "employee/date",
        )

    def windows_for_employee_and_date_range(
        self, employee_id: str, start_date: date, end_date: date
    ) -> List[EmployeeWorkHour]:
        """An employee's available windows between two dates (inclusive)."""
        return self._run(
            self._available().filter(
                EmployeeWorkHour.employee_id == employee_id,
                EmployeeWorkHour.work_date >= start_date,
                EmployeeWorkHour.work_date <= end_date,
            ),
            "employee/range",
        )

    def windows_in_date_range(self, start_date: date, end_date: date) -> List[EmployeeWorkHour]:
        """All available windows between two dates (inclusive), across employees."""
        return self._run(
            self._available().filter(
                EmployeeWorkHour.work_date >= start_date,
                EmployeeWorkHour.work_date <= end_date,
            ),
            "range",
        )

    def all_for_employee_and_date(
        self, employee_id: str, work_date: date
    ) -> List[EmployeeWorkHour]:
        """
        Every window of an employee on a date, available or not.

        Used for overlap validation when adding windows.
        """
        return self._run(
            self.db.query(EmployeeWorkHour).filter(
                EmployeeWorkHour.employee_id == employee_id,
                EmployeeWorkHour.work_date == work_date,
            ),
            "employee/date (all)",
        )

    def delete_for_employee_and_date(self, employee_id: str, work_date: date) -> int:
        """Delete every window of an employee on a date; returns the count."""
        try:
            count = (
                self.db.query(EmployeeWorkHour)
                .filter(
                    EmployeeWorkHour.employee_id == employee_id,
                    EmployeeWorkHour.work_date == work_date,
                )
                .delete(synchronize_session="fetch")
            )
            self.db.flush()
            return int(count)
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error deleting work hours for {employee_id} on {work_date}: {str(e)}"
            )
            self.db.rollback()
            raise RepositoryException(f"Failed to delete work hours: {str(e)}")
