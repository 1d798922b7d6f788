# backend/guidebook/services/monthly_availability_service.py
"""
Monthly Availability Service for the Guidebook platform

Answers "which days of this month have any open slot" for the calendar view.

This is deliberately coarser than SlotService: a slot counts as open when it
does not overlap another booking of the same employee. Capacity sharing
(category, location, headcount) is not applied, so a day shown as available
here can still turn out to have no bookable slot once SlotService applies
the full rule. The participant count is accepted for API symmetry only.
"""

import calendar
from collections import defaultdict
from datetime import date, timedelta
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.timezone_utils import get_local_today
from ..models.activity import Activity
from ..models.booking import Booking, BookingStatus
from ..models.work_hour import EmployeeWorkHour
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.work_hour_repository import WorkHourRepository
from ..utils.time_utils import iter_slot_starts, overlaps
from .base import BaseService

logger = logging.getLogger(__name__)


class MonthlyAvailabilityService(BaseService):
    """Month calendar availability."""

    def __init__(
        self,
        db: Session,
        work_hour_repository: Optional[WorkHourRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        step_minutes: Optional[int] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.work_hour_repository = (
            work_hour_repository or RepositoryFactory.create_work_hour_repository(db)
        )
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(
            db
        )
        self.step_minutes = step_minutes or settings.slot_step_minutes

    @BaseService.measure_operation("available_dates")
    def available_dates(
        self,
        activity: Activity,
        reference_date: date,
        participant_count: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[date]:
        """
        Days of reference_date's month with at least one open slot.

        Args:
            activity: The activity (its duration sets the slot length)
            reference_date: Any day inside the month to inspect
            participant_count: Not used by the check
            today: Override for the current local date

        Returns:
            Ascending dates; past days and days without work windows are omitted
        """
        today = today or get_local_today()
        first_day = reference_date.replace(day=1)
        last_day = reference_date.replace(
            day=calendar.monthrange(reference_date.year, reference_date.month)[1]
        )

        windows_by_day: Dict[date, List[EmployeeWorkHour]] = defaultdict(list)
        for window in self.work_hour_repository.windows_in_date_range(first_day, last_day):
            windows_by_day[window.work_date].append(window)

        bookings_by_day: Dict[date, List[Booking]] = defaultdict(list)
        for booking in self.booking_repository.for_date_range_excluding_status(
            first_day, last_day, BookingStatus.CANCELLED
        ):
            bookings_by_day[booking.booking_date].append(booking)

        result: List[date] = []
        current = first_day
        while current <= last_day:
            if current >= today and current in windows_by_day:
                if self._day_has_open_slot(
                    activity, windows_by_day[current], bookings_by_day.get(current, [])
                ):
                    result.append(current)
            current += timedelta(days=1)

        return result

    def _day_has_open_slot(
        self,
        activity: Activity,
        windows: Sequence[EmployeeWorkHour],
        bookings: Sequence[Booking],
    ) -> bool:
        for window in windows:
            own_bookings = [b for b in bookings if b.employee_id == window.employee_id]
            for start, end in iter_slot_starts(
                window.start_time, window.end_time, activity.duration_minutes, self.step_minutes
            ):
                if not any(overlaps(start, end, b.start_time, b.end_time) for b in own_bookings):
                    return True
        return False
