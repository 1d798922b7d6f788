# backend/guidebook/models/activity.py
"""
Activity catalog models for the Guidebook platform.

An ActivityCategory groups activities and carries the headcount ceiling a
single guide may supervise at once across all activities of the category.
An Activity is the bookable product: a place, a duration and participant
bounds.
"""

from datetime import datetime, timezone
import logging
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import LOCATION_COORDINATE_TOLERANCE
from ..database import Base

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityCategory(Base):
    """
    Grouping of activities that one guide may run side by side.

    max_participants_per_guide is the total number of participants one
    employee may shepherd simultaneously across every activity of this
    category at the same location.
    """

    __tablename__ = "activity_categories"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    slug = Column(String(100), unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    max_participants_per_guide = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("max_participants_per_guide > 0", name="check_guide_capacity_positive"),
    )

    def __repr__(self) -> str:
        return f"<ActivityCategory {self.name} max/guide={self.max_participants_per_guide}>"


class Activity(Base):
    """
    Bookable guided activity.

    Location is free text plus an optional city and optional coordinates;
    see has_same_location_as for how two activities are judged to take place
    at the same spot.
    """

    __tablename__ = "activities"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    category_id = Column(String(26), ForeignKey("activity_categories.id"), nullable=True, index=True)

    # Location
    location = Column(String(255), nullable=False)
    city = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    duration_minutes = Column(Integer, nullable=False)
    min_participants = Column(Integer, nullable=False, default=1)
    max_participants = Column(Integer, nullable=False)
    price_per_person = Column(Numeric(10, 2), nullable=False)
    deposit_percent = Column(Numeric(5, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    category = relationship("ActivityCategory", lazy="joined")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="check_activity_duration_positive"),
        CheckConstraint("min_participants > 0", name="check_min_participants_positive"),
        CheckConstraint("min_participants <= max_participants", name="check_participant_bounds"),
        CheckConstraint("price_per_person >= 0", name="check_activity_price_non_negative"),
    )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def location_identifier(self) -> str:
        """
        Canonical "same place" key.

        Rounded coordinates (4 decimals) when available, otherwise
        "<location>|<city>" lower-cased and trimmed.
        """
        if self.has_coordinates:
            return f"{round(self.latitude, 4):.4f},{round(self.longitude, 4):.4f}"
        city = self.city or ""
        return f"{self.location}|{city}".lower().strip()

    def has_same_location_as(self, other: "Activity") -> bool:
        """
        True if both activities take place at the same physical spot.

        Coordinates within LOCATION_COORDINATE_TOLERANCE on both axes win when
        both activities have them; otherwise the text identifiers must match.
        """
        if self.has_coordinates and other.has_coordinates:
            lat_diff = abs(self.latitude - other.latitude)
            lon_diff = abs(self.longitude - other.longitude)
            return lat_diff < LOCATION_COORDINATE_TOLERANCE and lon_diff < LOCATION_COORDINATE_TOLERANCE

        return self.location_identifier == other.location_identifier

    @property
    def max_participants_per_guide(self) -> Optional[int]:
        return self.category.max_participants_per_guide if self.category else None

    def __repr__(self) -> str:
        return f"<Activity {self.name} ({self.duration_minutes}min) @ {self.location_identifier}>"
