# backend/guidebook/repositories/work_hour_request_repository.py
"""
Work Hour Request Repository for the Guidebook platform

Lookups behind the employee's own request list and the admin review queue.
Lists are newest first.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.work_hour_request import WorkHourRequest
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class WorkHourRequestRepository(BaseRepository[WorkHourRequest]):
    """Repository for work hour requests."""

    def __init__(self, db: Session):
        super().__init__(db, WorkHourRequest)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(WorkHourRequest.employee),
            joinedload(WorkHourRequest.reviewed_by),
        )

    def _newest_first(self, query: Query, what: str) -> List[WorkHourRequest]:
        try:
            return cast(
                List[WorkHourRequest],
                query.order_by(
                    WorkHourRequest.requested_at.desc(), WorkHourRequest.id.desc()
                ).all(),
            )
        except Exception as e:
            self.logger.error(f"Error getting work hour requests ({what}): {str(e)}")
            raise RepositoryException(f"Failed to get work hour requests: {str(e)}")

    def for_employee(self, employee_id: str) -> List[WorkHourRequest]:
        return self._newest_first(
            self._apply_eager_loading(self.db.query(WorkHourRequest)).filter(
                WorkHourRequest.employee_id == employee_id
            ),
            "employee",
        )

    def all_requests(self, status: Optional[str] = None) -> List[WorkHourRequest]:
        """Every request, optionally narrowed to one status."""
        query = self._apply_eager_loading(self.db.query(WorkHourRequest))
        if status is not None:
            query = query.filter(WorkHourRequest.status == status)
        return self._newest_first(query, f"status={status or 'any'}")
