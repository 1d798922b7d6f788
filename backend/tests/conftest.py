# backend/tests/conftest.py
"""
Pytest configuration for the Guidebook backend.

Every test gets a fresh in-memory SQLite database; tables are created before
the test and dropped after it.
"""

import os
import sys

# Set testing mode BEFORE any guidebook imports
os.environ["is_testing"] = "true"

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from guidebook.api.dependencies import get_db  # noqa: E402
from guidebook.core.enums import RoleName  # noqa: E402
from guidebook.database import Base  # noqa: E402
from guidebook.main import app  # noqa: E402
from guidebook.models.rbac import Role  # noqa: E402
from guidebook.services.base import BaseService  # noqa: E402

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)


def _seed_roles(session: Session) -> None:
    for role_name in RoleName:
        session.add(Role(name=role_name.value, description=f"{role_name.value} role"))
    session.commit()


@pytest.fixture(scope="function")
def db():
    """Fresh database session with the role catalog seeded."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    _seed_roles(session)

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db: Session):
    """Create a test client bound to the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture(autouse=True)
def _reset_service_metrics():
    yield
    BaseService._class_metrics.clear()
