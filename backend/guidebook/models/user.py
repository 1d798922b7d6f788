# backend/guidebook/models/user.py
"""
User model for the Guidebook platform.

Customers, employees (guides) and administrators are all users; what a user
may do is decided by the roles attached to it.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import RoleName
from ..database import Base
from .rbac import user_roles

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Platform account.

    Attributes:
        id: ULID primary key
        username: Unique login name
        email: Unique email address
        first_name / last_name: Display name parts
        phone: Optional contact number
        is_active: Disabled users are never offered as employees
        created_at: Creation time, also the directory's store order

    Relationships:
        roles: Many-to-many with Role through user_roles table
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    roles = relationship(
        "Role", secondary=user_roles, back_populates="users", lazy="selectin"
    )  # Eager load roles

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def has_role(self, role_name: RoleName) -> bool:
        """Check if the user holds a role."""
        wanted = role_name.value if isinstance(role_name, RoleName) else str(role_name)
        return any(role.name == wanted for role in self.roles or [])

    @property
    def is_employee(self) -> bool:
        return self.has_role(RoleName.EMPLOYEE)

    def __repr__(self) -> str:
        role_names = [role.name for role in self.roles] if self.roles else ["no roles"]
        return f"<User {self.username} roles={role_names}>"
