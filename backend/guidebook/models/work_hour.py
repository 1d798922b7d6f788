# backend/guidebook/models/work_hour.py
"""
Employee work windows.

One row is one contiguous interval [start_time, end_time) on a date during
which an employee can be scheduled. An employee may have several disjoint
windows on the same date (a morning and an evening shift, say).
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Date, ForeignKey, Index, String, Time
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class EmployeeWorkHour(Base):
    """Work window of one employee on one date."""

    __tablename__ = "employee_work_hours"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    employee_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    work_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    employee = relationship("User")

    __table_args__ = (
        Index("idx_employee_work_hours_employee_date", "employee_id", "work_date"),
        CheckConstraint("start_time <> end_time", name="check_work_window_not_empty"),
    )

    def __repr__(self) -> str:
        return (
            f"<EmployeeWorkHour {self.employee_id} {self.work_date} "
            f"{self.start_time}-{self.end_time}>"
        )
