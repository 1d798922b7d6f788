# backend/guidebook/services/work_hour_request_service.py
"""
Work Hour Request Service for the Guidebook platform

Employees propose work windows; admins approve or reject them. A request is
checked against the employee's existing windows when it is filed and again
when it is approved, since windows may have been added in between. Approval
creates the window in the same transaction that marks the request approved.
"""

from datetime import date, time
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import get_local_today, utc_now
from ..models.user import User
from ..models.work_hour_request import WorkHourRequest, WorkHourRequestStatus
from ..repositories import RepositoryFactory
from ..repositories.work_hour_request_repository import WorkHourRequestRepository
from .base import BaseService
from .work_hour_service import WorkHourService

logger = logging.getLogger(__name__)


class WorkHourRequestService(BaseService):
    """Filing, cancelling and reviewing work hour requests."""

    def __init__(
        self,
        db: Session,
        request_repository: Optional[WorkHourRequestRepository] = None,
        work_hour_service: Optional[WorkHourService] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.request_repository = (
            request_repository or RepositoryFactory.create_work_hour_request_repository(db)
        )
        self.work_hour_service = work_hour_service or WorkHourService(db)
        self.user_repository = self.work_hour_service.user_repository

    def _get_employee(self, employee_id: str) -> User:
        employee = self.user_repository.get_by_id(employee_id)
        if employee is None:
            raise NotFoundException(f"Employee {employee_id} not found", code="EMPLOYEE_NOT_FOUND")
        if not employee.is_employee:
            raise ForbiddenException(
                f"User {employee_id} is not an employee", code="NOT_AN_EMPLOYEE"
            )
        return employee

    def _get_reviewer(self, reviewer_id: str) -> User:
        reviewer = self.user_repository.get_by_id(reviewer_id)
        if reviewer is None:
            raise NotFoundException(f"User {reviewer_id} not found", code="USER_NOT_FOUND")
        if not reviewer.has_role(RoleName.ADMIN):
            raise ForbiddenException(
                "Only administrators can review work hour requests", code="NOT_AN_ADMIN"
            )
        return reviewer

    def _lock_pending(self, request_id: str) -> WorkHourRequest:
        request = self.request_repository.get_for_update(request_id)
        if request is None:
            raise NotFoundException(
                f"Work hour request {request_id} not found", code="REQUEST_NOT_FOUND"
            )
        if not request.is_pending:
            raise BusinessRuleException(
                "Request has already been reviewed",
                code="REQUEST_ALREADY_REVIEWED",
                details={"status": request.status},
            )
        return request

    def _file(
        self,
        employee: User,
        work_date: date,
        start_time: time,
        end_time: time,
        is_available: bool,
        notes: Optional[str],
    ) -> WorkHourRequest:
        self.work_hour_service.validate_window(employee.id, work_date, start_time, end_time)
        return self.request_repository.create(
            employee=employee,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            is_available=is_available,
            notes=notes,
            status=WorkHourRequestStatus.PENDING.value,
        )

    @BaseService.measure_operation("create_work_hour_request")
    def create_request(
        self,
        employee_id: str,
        work_date: date,
        start_time: time,
        end_time: time,
        is_available: bool = True,
        notes: Optional[str] = None,
    ) -> WorkHourRequest:
        """
        File a request for one window.

        Raises:
            NotFoundException: If the user does not exist
            ForbiddenException: If the user is not an employee
            ValidationException: If the date is past or the range is invalid
            AvailabilityOverlapException: If it overlaps an existing window
        """
        employee = self._get_employee(employee_id)
        if work_date < get_local_today():
            raise ValidationException(
                "Cannot request work hours for a past date", code="PAST_DATE"
            )

        with self.transaction():
            request = self._file(employee, work_date, start_time, end_time, is_available, notes)

        self.log_operation("create_work_hour_request", request_id=request.id, date=work_date)
        return request

    @BaseService.measure_operation("create_bulk_work_hour_request")
    def create_bulk_request(
        self,
        employee_id: str,
        dates: Iterable[date],
        start_time: time,
        end_time: time,
        is_available: bool = True,
        notes: Optional[str] = None,
    ) -> List[WorkHourRequest]:
        """
        File the same window on several dates.

        Past dates are skipped. All-or-nothing for the rest: one overlapping
        date rejects the batch.
        """
        employee = self._get_employee(employee_id)
        today = get_local_today()
        upcoming = sorted({d for d in dates if d >= today})
        if not upcoming:
            raise ValidationException(
                "No upcoming dates in the request", code="NO_UPCOMING_DATES"
            )

        with self.transaction():
            requests = [
                self._file(employee, work_date, start_time, end_time, is_available, notes)
                for work_date in upcoming
            ]

        self.logger.info(f"{len(requests)} work hour requests filed by {employee.username}")
        return requests

    def list_my_requests(self, employee_id: str) -> List[WorkHourRequest]:
        """An employee's requests, newest first."""
        employee = self._get_employee(employee_id)
        return self.request_repository.for_employee(employee.id)

    def list_requests(self, status: Optional[str] = None) -> List[WorkHourRequest]:
        """Every request for the admin screen, optionally one status only."""
        if status is None:
            return self.request_repository.all_requests()
        try:
            wanted = WorkHourRequestStatus(status.strip().upper())
        except ValueError:
            raise ValidationException(f"Invalid status: {status}", code="INVALID_STATUS")
        return self.request_repository.all_requests(wanted.value)

    def list_pending_requests(self) -> List[WorkHourRequest]:
        return self.request_repository.all_requests(WorkHourRequestStatus.PENDING.value)

    @BaseService.measure_operation("cancel_work_hour_request")
    def cancel_request(self, request_id: str, employee_id: str) -> None:
        """
        Withdraw a pending request. Only its owner may do so.

        Raises:
            NotFoundException: If the request does not exist
            ForbiddenException: If the caller does not own the request
            BusinessRuleException: If the request was already reviewed
        """
        with self.transaction():
            request = self.request_repository.get_for_update(request_id)
            if request is None:
                raise NotFoundException(
                    f"Work hour request {request_id} not found", code="REQUEST_NOT_FOUND"
                )
            if request.employee_id != employee_id:
                raise ForbiddenException(
                    "You can only cancel your own requests", code="NOT_REQUEST_OWNER"
                )
            if not request.is_pending:
                raise BusinessRuleException(
                    "Only pending requests can be cancelled",
                    code="REQUEST_NOT_PENDING",
                    details={"status": request.status},
                )
            self.request_repository.delete(request.id)

        self.logger.info(f"Work hour request {request_id} cancelled by {employee_id}")

    @BaseService.measure_operation("approve_work_hour_request")
    def approve_request(self, request_id: str, reviewer_id: str) -> WorkHourRequest:
        """
        Approve a pending request and create its work window.

        Raises:
            ForbiddenException: If the reviewer is not an admin
            BusinessRuleException: If the request was already reviewed
            AvailabilityOverlapException: If the window now overlaps another
        """
        reviewer = self._get_reviewer(reviewer_id)
        with self.transaction():
            request = self._lock_pending(request_id)
            self.work_hour_service.create_window(
                request.employee_id,
                request.work_date,
                request.start_time,
                request.end_time,
                request.is_available,
            )
            request.status = WorkHourRequestStatus.APPROVED.value
            request.reviewed_at = utc_now()
            request.reviewed_by = reviewer
            self.db.flush()

        self.logger.info(f"Work hour request {request_id} approved by {reviewer.username}")
        return request

    @BaseService.measure_operation("reject_work_hour_request")
    def reject_request(self, request_id: str, reviewer_id: str, reason: str) -> WorkHourRequest:
        """Reject a pending request with a reason shown to the employee."""
        if not (reason or "").strip():
            raise ValidationException("A rejection reason is required", code="REASON_REQUIRED")
        reviewer = self._get_reviewer(reviewer_id)
        with self.transaction():
            request = self._lock_pending(request_id)
            request.status = WorkHourRequestStatus.REJECTED.value
            request.reviewed_at = utc_now()
            request.reviewed_by = reviewer
            request.rejection_reason = reason.strip()
            self.db.flush()

        self.logger.info(f"Work hour request {request_id} rejected by {reviewer.username}")
        return request
