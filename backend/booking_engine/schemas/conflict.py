"""Conflict timeline entries aggregated from every commitment source."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ConflictSource(str, Enum):
    """Where a blocking commitment came from."""

    APPOINTMENT = "appointment"
    COURSE = "course"
    EXTERNAL_CALENDAR = "external_calendar"


class Conflict(BaseModel):
    """A UTC interval a new booking must not overlap."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    start_time: datetime
    end_time: datetime
    source: ConflictSource
    label: Optional[str] = None
