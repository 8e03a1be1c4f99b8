"""Payloads exchanged with the external calendar service."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")


class BusyInterval(BaseModel):
    """A busy window reported by an instructor's external calendar."""

    start: datetime
    end: datetime
    label: Optional[str] = None
    calendar_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_order(self) -> "BusyInterval":
        if self.end <= self.start:
            raise ValueError("Busy interval end must be after start")
        return self


class CalendarConflictCheck(BaseModel):
    """Commit-time conflict lookup result."""

    has_conflict: bool
    conflicting_event: Optional[BusyInterval] = None


class CalendarEventData(BaseModel):
    """Event mirrored into the instructor's calendar for an appointment."""

    summary: str
    description: Optional[str] = None
    start: datetime
    end: datetime
    attendees: List[str] = Field(default_factory=list)
    calendar_id: Optional[str] = None


class CalendarEventUpdate(BaseModel):
    """Partial update for a mirrored event."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    calendar_id: Optional[str] = None


class CalendarCallStatus(str, Enum):
    """Outcome of one external calendar call."""

    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class CalendarResult(Generic[T]):
    """
    Wrapper distinguishing data, a normal empty answer, and a logged failure.

    Call sites treat EMPTY and ERROR the same way (fail-open).
    """

    status: CalendarCallStatus
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> "CalendarResult[T]":
        return cls(status=CalendarCallStatus.OK, data=data)

    @classmethod
    def empty(cls) -> "CalendarResult[T]":
        return cls(status=CalendarCallStatus.EMPTY)

    @classmethod
    def failed(cls, error: str) -> "CalendarResult[T]":
        return cls(status=CalendarCallStatus.ERROR, error=error)

    @property
    def has_data(self) -> bool:
        return self.status == CalendarCallStatus.OK and self.data is not None
