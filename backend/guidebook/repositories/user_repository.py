# backend/guidebook/repositories/user_repository.py
"""
User Repository for the Guidebook platform

Lookups of users by id and the employee directory used by the
assignment engine.
"""

import logging
from typing import Any, List, Optional, cast

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..core.exceptions import RepositoryException
from ..models.rbac import Role
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User data access."""

    def __init__(self, db: Session):
        """Initialize with User model."""
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)

    def get_by_id(self, id: Any, load_relationships: bool = True) -> Optional[User]:
        """Get user by ID (roles are always loaded)."""
        if id is None:
            return None
        try:
            return cast(Optional[User], self.db.query(User).filter(User.id == str(id)).first())
        except Exception as e:
            self.logger.error(f"Error getting user by ID {id}: {str(e)}")
            raise RepositoryException(f"Failed to get user: {str(e)}")

    def employees_with_role(
        self, role_name: RoleName = RoleName.EMPLOYEE, enabled_only: bool = True
    ) -> List[User]:
        """
        Users holding a role, in store order.

        Store order is creation time, then id. The assignment engine picks the
        first qualifying employee in this order, so it must stay stable.

        Args:
            role_name: Role to filter on (employees by default)
            enabled_only: Drop disabled accounts
        """
        try:
            query = self.db.query(User).join(User.roles).filter(Role.name == role_name.value)
            if enabled_only:
                query = query.filter(User.is_active.is_(True))
            return cast(List[User], query.order_by(User.created_at, User.id).all())

        except Exception as e:
            self.logger.error(f"Error getting users with role {role_name}: {str(e)}")
            raise RepositoryException(f"Failed to get employees: {str(e)}")
