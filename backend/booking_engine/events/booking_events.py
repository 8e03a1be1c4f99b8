"""Appointment domain events handed to the notification dispatcher."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class AppointmentBooked:
    """Fired after an appointment is committed (pending or confirmed)."""

    appointment_id: str
    instructor_id: str
    student_id: Optional[str]
    status: str
    start_time: datetime
    end_time: datetime
    requires_approval: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppointmentApproved:
    """Fired when the instructor confirms a pending appointment."""

    appointment_id: str
    instructor_id: str
    student_id: Optional[str]
    confirmed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppointmentRejected:
    appointment_id: str
    instructor_id: str
    student_id: Optional[str]
    rejected_at: datetime
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppointmentCancelled:
    """Fired after an appointment is cancelled by the student or the instructor."""

    appointment_id: str
    instructor_id: str
    student_id: Optional[str]
    cancelled_by: str  # 'student' or 'instructor'
    cancelled_at: datetime
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppointmentRescheduled:
    appointment_id: str
    instructor_id: str
    student_id: Optional[str]
    previous_start_time: datetime
    previous_end_time: datetime
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
