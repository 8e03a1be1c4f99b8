# backend/booking_engine/services/calendar_sync_service.py
"""
Calendar Sync Service for the booking engine.

Wraps every external calendar call in a CalendarResult so that read paths
and the commit-time recheck degrade to "external calendar unknown" instead
of failing. Mirroring appointments into the instructor's calendar is
best-effort: failures are logged and never reach the caller.
"""

from datetime import datetime
import logging
from typing import Callable, List, Optional, TypeVar

from sqlalchemy.orm import Session

from ..core.config import settings
from ..integrations.calendar_provider import CalendarProvider, create_calendar_provider
from ..models.appointment import Appointment
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..schemas.calendar import (
    BusyInterval,
    CalendarCallStatus,
    CalendarConflictCheck,
    CalendarEventData,
    CalendarEventUpdate,
    CalendarResult,
)
from .base import BaseService

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_STUDENT_NAME = "Unknown Student"


def build_event_data(
    appointment: Appointment, instructor: Optional[User] = None
) -> CalendarEventData:
    """
    Calendar event mirrored for an appointment.

    Summary is "<type title> - <student name>"; the description lists the
    appointment type, student contact details, notes and party size.
    """
    appointment_type = appointment.appointment_type
    type_title = appointment_type.title if appointment_type else "Appointment"
    student = appointment.student
    student_name = (student.name or student.email) if student else UNKNOWN_STUDENT_NAME

    lines = [
        f"Appointment Type: {type_title}",
        f"Student: {student_name}",
        f"Email: {student.email}" if student and student.email else None,
        f"Phone: {student.phone}" if student and student.phone else None,
        f"Notes: {appointment.student_notes}" if appointment.student_notes else None,
        f"Party Size: {appointment.party_size}"
        if appointment.party_size and appointment.party_size > 1
        else None,
    ]

    return CalendarEventData(
        summary=f"{type_title} - {student_name}",
        description="\n".join(line for line in lines if line),
        start=appointment.start_time,
        end=appointment.end_time,
        attendees=[student.email] if student and student.email else [],
        calendar_id=instructor.calendar_primary_id if instructor else None,
    )


class CalendarSyncService(BaseService):
    """Fail-open facade over the configured CalendarProvider."""

    def __init__(self, db: Session, provider: Optional[CalendarProvider] = None):
        """
        Initialize calendar sync service.

        Args:
            db: Database session
            provider: Calendar backend; defaults to the configured one
        """
        super().__init__(db)
        self.provider = provider or create_calendar_provider()

    def _call(
        self,
        operation: str,
        func: Callable[[], T],
        is_empty: Callable[[T], bool],
        **context: object,
    ) -> CalendarResult[T]:
        try:
            data = func()
        except Exception as exc:
            self.logger.error(
                f"Calendar {operation} failed, continuing without calendar data: {str(exc)}",
                extra={"operation": operation, "provider": self.provider.name, **context},
            )
            result: CalendarResult[T] = CalendarResult.failed(str(exc))
        else:
            result = CalendarResult.empty() if is_empty(data) else CalendarResult.ok(data)

        self._record_call(operation, result.status)
        return result

    @staticmethod
    def _record_call(operation: str, status: CalendarCallStatus) -> None:
        if not settings.metrics_enabled:
            return
        try:
            prometheus_metrics.record_calendar_call(operation, status.value)
        except Exception as metrics_error:
            logger.debug(f"Metrics recording failed: {metrics_error}")

    @BaseService.measure_operation("calendar_busy_intervals")
    def get_busy_intervals(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> CalendarResult[List[BusyInterval]]:
        return self._call(
            "get_busy_intervals",
            lambda: self.provider.get_busy_intervals(instructor_id, start, end),
            lambda intervals: not intervals,
            instructor_id=instructor_id,
        )

    @BaseService.measure_operation("calendar_check_conflict")
    def check_conflict(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> CalendarResult[CalendarConflictCheck]:
        return self._call(
            "check_conflict",
            lambda: self.provider.check_conflict(instructor_id, start, end),
            lambda check: not check.has_conflict,
            instructor_id=instructor_id,
        )

    @BaseService.measure_operation("mirror_appointment")
    def mirror_appointment(self, appointment: Appointment) -> Optional[str]:
        """
        Create the calendar event for a committed appointment.

        Returns:
            The external event id, or None when the instructor does not sync,
            is not connected, or the call failed
        """
        instructor = appointment.instructor
        if instructor is None or not instructor.mirrors_to_calendar:
            return None

        event = build_event_data(appointment, instructor)
        result = self._call(
            "create_event",
            lambda: self.provider.create_event(appointment.instructor_id, event),
            lambda event_id: not event_id,
            appointment_id=appointment.id,
        )
        return result.data if result.has_data else None

    @BaseService.measure_operation("move_calendar_event")
    def move_event(self, appointment: Appointment) -> bool:
        """Move the mirrored event to the appointment's current times."""
        if not appointment.external_event_id:
            return False
        instructor = appointment.instructor
        update = CalendarEventUpdate(
            start=appointment.start_time,
            end=appointment.end_time,
            calendar_id=instructor.calendar_primary_id if instructor else None,
        )
        result = self._call(
            "update_event",
            lambda: self.provider.update_event(
                appointment.instructor_id, appointment.external_event_id, update
            ),
            lambda updated: not updated,
            appointment_id=appointment.id,
        )
        return bool(result.has_data)

    @BaseService.measure_operation("remove_calendar_event")
    def remove_event(self, appointment: Appointment) -> bool:
        """Delete the mirrored event of a cancelled or rejected appointment."""
        if not appointment.external_event_id:
            return False
        instructor = appointment.instructor
        result = self._call(
            "delete_event",
            lambda: self.provider.delete_event(
                appointment.instructor_id,
                appointment.external_event_id,
                instructor.calendar_primary_id if instructor else None,
            ),
            lambda deleted: not deleted,
            appointment_id=appointment.id,
        )
        return bool(result.has_data)
