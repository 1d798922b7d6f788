# backend/guidebook/repositories/activity_repository.py
"""
Activity Repository for the Guidebook platform
"""

import logging

from sqlalchemy.orm import Query, Session, joinedload

from ..models.activity import Activity
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ActivityRepository(BaseRepository[Activity]):
    """Repository for the activity catalog."""

    def __init__(self, db: Session):
        super().__init__(db, Activity)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Activity.category))
