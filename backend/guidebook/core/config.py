# backend/guidebook/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_BOOKING_CONFLICT_RETRIES,
    DEFAULT_PAYMENT_DEADLINE_HOURS,
    DEFAULT_SLOT_STEP_MINUTES,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Application settings, overridable through environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development", description="Deployment environment")
    log_level: str = Field(default="INFO", description="Root log level")
    is_testing: bool = Field(default=False, description="Set by the test suite")

    database_url: str = Field(
        default="sqlite:///./guidebook.db",
        description="SQLAlchemy URL of the primary database",
    )
    test_database_url: Optional[str] = Field(
        default="sqlite://",
        description="Database used by the test suite",
    )

    # All booking times are local times in this zone; no per-user timezones.
    timezone: str = Field(default="Europe/Bucharest")

    slot_step_minutes: int = Field(
        default=DEFAULT_SLOT_STEP_MINUTES,
        description="Granularity used when scanning work windows for candidate slots",
    )
    payment_deadline_hours: int = Field(
        default=DEFAULT_PAYMENT_DEADLINE_HOURS,
        description="Hours a confirmed booking has to be paid before the sweep cancels it",
    )
    booking_conflict_retries: int = Field(
        default=DEFAULT_BOOKING_CONFLICT_RETRIES,
        description="Extra read-decide-write attempts when a capacity re-check fails",
    )
    expired_booking_sweep_minutes: int = Field(default=60)

    celery_broker_url: str = Field(default="redis://localhost:6379/0")

    cors_allow_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of browser origins allowed to call the API",
    )

    @field_validator("slot_step_minutes", "payment_deadline_hours", "expired_booking_sweep_minutes")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("booking_conflict_retries")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    def get_database_url(self) -> str:
        """Return the database URL for the current mode."""
        if self.is_testing or is_running_tests():
            return self.test_database_url or "sqlite://"
        return self.database_url


settings = Settings()
