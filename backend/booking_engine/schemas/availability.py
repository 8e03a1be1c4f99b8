# backend/booking_engine/schemas/availability.py
"""
Availability schemas for the booking engine.

AvailabilityBlock and TimeSlot are derived values: blocks are resolved from
weekly templates and date overrides on demand, slots are cut from blocks.
Neither is persisted.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.time_utils import normalize_wall_clock, wall_clock_to_minutes


class AvailabilityBlock(BaseModel):
    """A bookable wall-clock window on one local calendar day."""

    model_config = ConfigDict(frozen=True)

    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: str
    end_time: str
    requires_approval: bool = False
    source: Literal["template", "override"] = "template"

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: str) -> str:
        """Store "HH:MM"; accepts "HH:MM:SS" as written by older clients."""
        return normalize_wall_clock(v)

    @model_validator(mode="after")
    def validate_time_order(self) -> "AvailabilityBlock":
        """Ensure end time is after start time."""
        if self.end_minutes <= self.start_minutes:
            raise ValueError("End time must be after start time")
        return self

    @property
    def start_minutes(self) -> int:
        return wall_clock_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return wall_clock_to_minutes(self.end_time)

    def contains(self, start_minutes: int, end_minutes: int) -> bool:
        """True when [start, end) lies entirely inside this block."""
        return start_minutes >= self.start_minutes and end_minutes <= self.end_minutes


class TimeSlot(BaseModel):
    """Candidate bookable interval returned to a caller browsing availability."""

    start_time: datetime
    end_time: datetime
    is_available: bool
    requires_approval: bool = False
    reason: Optional[str] = None

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)
