"""Pydantic schemas for derived availability values, booking results and calendar payloads."""

from .availability import AvailabilityBlock, TimeSlot
from .booking import BookingExtras, BookingResult, ValidationFailure, ValidationResult
from .calendar import (
    BusyInterval,
    CalendarCallStatus,
    CalendarConflictCheck,
    CalendarEventData,
    CalendarEventUpdate,
    CalendarResult,
)
from .conflict import Conflict, ConflictSource

__all__ = [
    "AvailabilityBlock",
    "BookingExtras",
    "BookingResult",
    "BusyInterval",
    "CalendarCallStatus",
    "CalendarConflictCheck",
    "CalendarEventData",
    "CalendarEventUpdate",
    "CalendarResult",
    "Conflict",
    "ConflictSource",
    "TimeSlot",
    "ValidationFailure",
    "ValidationResult",
]
