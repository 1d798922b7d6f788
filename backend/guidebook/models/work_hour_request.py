# backend/guidebook/models/work_hour_request.py
"""
Work hour requests.

An employee proposes a work window; an admin approves it (the window is then
created) or rejects it with a reason. A request is reviewed at most once.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Time,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkHourRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class WorkHourRequest(Base):
    """A proposed work window awaiting (or past) admin review."""

    __tablename__ = "work_hour_requests"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    employee_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    work_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    status = Column(
        String(20), nullable=False, default=WorkHourRequestStatus.PENDING.value, index=True
    )
    notes = Column(String(1000), nullable=True)
    requested_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    rejection_reason = Column(String(500), nullable=True)

    employee = relationship("User", foreign_keys=[employee_id])
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_id])

    __table_args__ = (
        Index("idx_work_hour_requests_employee", "employee_id", "requested_at"),
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_work_hour_requests_status",
        ),
        CheckConstraint("start_time <> end_time", name="check_work_request_not_empty"),
    )

    def __repr__(self) -> str:
        return (
            f"<WorkHourRequest {self.id}: employee={self.employee_id} {self.work_date} "
            f"{self.start_time}-{self.end_time} status={self.status}>"
        )

    @property
    def is_pending(self) -> bool:
        return self.status == WorkHourRequestStatus.PENDING.value

    @property
    def employee_name(self) -> str:
        return self.employee.full_name if self.employee is not None else ""

    @property
    def reviewed_by_name(self) -> Optional[str]:
        return self.reviewed_by.full_name if self.reviewed_by is not None else None
