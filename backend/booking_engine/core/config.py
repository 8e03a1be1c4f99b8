# backend/booking_engine/core/config.py
import logging
import os
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    environment: str = "development"
    log_level: str = Field(default="INFO", description="Root log level for setup_logging()")

    database_url: str = Field(
        default="sqlite:///./booking_engine.db",
        description="SQLAlchemy URL for the appointment store",
    )
    database_echo: bool = False

    # Availability templates and overrides are wall-clock strings interpreted in this zone
    instructor_timezone: str = Field(
        default="America/Denver",
        description="IANA timezone used for every instructor's wall-clock availability",
    )

    # External calendar collaborator
    calendar_provider: Literal["instructor_ops", "google", "none"] = Field(
        default="instructor_ops",
        description="Backend used for busy-time lookups and event mirroring",
    )
    instructor_ops_base_url: str = Field(
        default="https://auth.instructorops.com",
        description="Base URL of the hosted InstructorOps calendar service",
    )
    instructor_ops_api_key: SecretStr | None = Field(
        default=None,
        description="Optional bearer token sent to InstructorOps",
    )
    google_calendar_base_url: str = Field(
        default="https://www.googleapis.com/calendar/v3",
        description="Google Calendar REST API root",
    )
    calendar_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for any single external calendar request",
    )

    # Variable-duration fallbacks when an appointment type leaves them unset
    default_variable_minimum_hours: int = 2
    default_variable_increment_minutes: int = 60

    metrics_enabled: bool = True
    slow_operation_seconds: float = Field(
        default=1.0, gt=0, description="Service calls slower than this are logged as warnings"
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("instructor_timezone")
    @classmethod
    def validate_timezone_name(cls, value: str) -> str:
        """Reject anything pytz cannot resolve."""
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value

    @field_validator("calendar_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("CALENDAR_TIMEOUT_SECONDS must be positive")
        return value

    @field_validator("default_variable_increment_minutes")
    @classmethod
    def validate_increment(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("DEFAULT_VARIABLE_INCREMENT_MINUTES must be positive")
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
logger.debug(
    "[CONFIG] Booking engine configuration: environment=%s timezone=%s calendar_provider=%s",
    settings.environment,
    settings.instructor_timezone,
    settings.calendar_provider,
)
