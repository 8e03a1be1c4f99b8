# backend/booking_engine/services/conflict_aggregator.py
"""
Conflict Aggregator for the booking engine.

Collects every commitment on an instructor's timeline into one list of UTC
intervals: active appointments, group-course sessions, and busy times from
the external calendar when the instructor has calendar blocking enabled.
Duplicates across sources are harmless for overlap testing and are kept.
"""

from datetime import date, datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..core.timezone_utils import ensure_utc, get_instructor_timezone, local_day_bounds_utc
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.course_repository import CourseRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..schemas.conflict import Conflict, ConflictSource
from ..utils.intervals import overlaps
from .base import BaseService
from .calendar_sync_service import CalendarSyncService

logger = logging.getLogger(__name__)


class ConflictAggregator(BaseService):
    """Builds the conflict timeline that slots and bookings are checked against."""

    def __init__(
        self,
        db: Session,
        appointment_repository: Optional[AppointmentRepository] = None,
        course_repository: Optional[CourseRepository] = None,
        user_repository: Optional[UserRepository] = None,
        calendar_sync: Optional[CalendarSyncService] = None,
        timezone_name: Optional[str] = None,
    ):
        super().__init__(db)
        self.appointment_repository = (
            appointment_repository or RepositoryFactory.create_appointment_repository(db)
        )
        self.course_repository = course_repository or RepositoryFactory.create_course_repository(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.calendar_sync = calendar_sync or CalendarSyncService(db)
        self.tz = get_instructor_timezone(timezone_name)

    @BaseService.measure_operation("aggregate_conflicts")
    def conflicts(self, instructor_id: str, start_date: date, end_date: date) -> List[Conflict]:
        """
        Conflicts for an inclusive range of local dates.

        Raises:
            ValidationException: If end_date is before start_date
        """
        if end_date < start_date:
            raise ValidationException("End date must not be before start date")
        range_start, range_end = local_day_bounds_utc(start_date, end_date, self.tz)
        return self.conflicts_between(instructor_id, range_start, range_end)

    def conflicts_between(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> List[Conflict]:
        """Conflicts intersecting the UTC range [start, end)."""
        start, end = ensure_utc(start), ensure_utc(end)
        conflicts: List[Conflict] = []

        for appointment in self.appointment_repository.get_by_instructor_in_range(
            instructor_id, start, end
        ):
            conflicts.append(
                Conflict(
                    start_time=appointment.start_time,
                    end_time=appointment.end_time,
                    source=ConflictSource.APPOINTMENT,
                    label=f"Appointment {appointment.id}",
                )
            )

        for session in self.course_repository.get_sessions_for_instructor_in_range(
            instructor_id, start, end
        ):
            conflicts.append(
                Conflict(
                    start_time=session.start_time,
                    end_time=session.end_time,
                    source=ConflictSource.COURSE,
                    label=session.course.title if session.course else None,
                )
            )

        conflicts.extend(self._calendar_conflicts(instructor_id, start, end))
        return conflicts

    def _calendar_conflicts(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> List[Conflict]:
        instructor = self.user_repository.get_by_id(instructor_id, load_relationships=False)
        if instructor is None or not instructor.blocks_on_calendar:
            return []

        result = self.calendar_sync.get_busy_intervals(instructor_id, start, end)
        if not result.has_data:
            return []

        return [
            Conflict(
                start_time=ensure_utc(busy.start),
                end_time=ensure_utc(busy.end),
                source=ConflictSource.EXTERNAL_CALENDAR,
                label=busy.label,
            )
            for busy in result.data or []
        ]


def find_overlapping(
    conflicts: List[Conflict], start: datetime, end: datetime
) -> Optional[Conflict]:
    """First conflict overlapping [start, end), or None."""
    for conflict in conflicts:
        if overlaps(start, end, conflict.start_time, conflict.end_time):
            return conflict
    return None
