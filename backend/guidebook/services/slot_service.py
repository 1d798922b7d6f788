# backend/guidebook/services/slot_service.py
"""
Slot Service for the Guidebook platform

Builds the bookable time grid of an activity for one day. Candidate starts
come from every employee work window on that day, stepped at a fixed
granularity; each candidate is marked available when at least one eligible
employee passes the capacity rule for it. Unavailable slots are returned too
so clients can draw the full grid.
"""

from dataclasses import dataclass
from datetime import date, time
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.activity import Activity
from ..repositories import RepositoryFactory
from ..repositories.work_hour_repository import WorkHourRepository
from ..utils.time_utils import iter_slot_starts
from .base import BaseService
from .employee_assignment_service import EmployeeAssignmentService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSlot:
    start_time: time
    end_time: time
    available: bool


def resolve_participant_count(activity: Activity, participant_count: Optional[int]) -> int:
    """Requested headcount, or the activity minimum when missing or not positive."""
    if participant_count is None or participant_count <= 0:
        return int(activity.min_participants)
    return participant_count


class SlotService(BaseService):
    """Per-day slot generation."""

    def __init__(
        self,
        db: Session,
        assignment_service: Optional[EmployeeAssignmentService] = None,
        work_hour_repository: Optional[WorkHourRepository] = None,
        step_minutes: Optional[int] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.assignment_service = assignment_service or EmployeeAssignmentService(db)
        self.work_hour_repository = (
            work_hour_repository or RepositoryFactory.create_work_hour_repository(db)
        )
        self.step_minutes = step_minutes or settings.slot_step_minutes

    @BaseService.measure_operation("available_slots")
    def available_slots(
        self,
        activity: Activity,
        slot_date: date,
        participant_count: Optional[int] = None,
    ) -> List[TimeSlot]:
        """
        Enumerate candidate slots of an activity on a date.

        Args:
            activity: The activity (its duration sets the slot length)
            slot_date: The day to enumerate
            participant_count: Headcount to test; defaults to the activity minimum

        Returns:
            Slots sorted by start then end, one per distinct (start, end)
        """
        windows = self.work_hour_repository.windows_for_date(slot_date)
        if not windows:
            return []

        employees = self.assignment_service.eligible_employees()
        if not employees:
            return []

        participants = resolve_participant_count(activity, participant_count)
        slots: Dict[Tuple[time, time], TimeSlot] = {}

        for window in windows:
            for start, end in iter_slot_starts(
                window.start_time, window.end_time, activity.duration_minutes, self.step_minutes
            ):
                # Several windows can yield the same slot; the result is the same.
                if (start, end) in slots:
                    continue
                employee = self.assignment_service.first_capable_employee(
                    employees, slot_date, start, end, activity, participants
                )
                slots[(start, end)] = TimeSlot(start, end, employee is not None)

        self.logger.debug(
            f"{len(slots)} slots for activity {activity.id} on {slot_date} "
            f"({participants} participants)"
        )
        return [slots[key] for key in sorted(slots)]
