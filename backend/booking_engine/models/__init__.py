"""
Database models for the booking engine.

The models are organized by functionality:
- Users (instructors and students) with external calendar flags
- Appointment types and their duration policy
- Weekly templates and date overrides
- Appointments
- Group courses and their sessions
"""

from .appointment import (
    ACTIVE_STATUSES,
    ALLOWED_TRANSITIONS,
    Appointment,
    AppointmentStatus,
    PaymentStatus,
)
from .appointment_type import AppointmentType, DurationMode
from .availability import AvailabilityOverride, WeeklyTemplate
from .course import Course, CourseSchedule
from .types import UTCDateTime
from .user import User

__all__ = [
    "ACTIVE_STATUSES",
    "ALLOWED_TRANSITIONS",
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
    "AvailabilityOverride",
    "Course",
    "CourseSchedule",
    "DurationMode",
    "PaymentStatus",
    "UTCDateTime",
    "User",
    "WeeklyTemplate",
]
