# backend/booking_engine/services/booking_validator.py
"""
Booking Validator for the booking engine.

Runs the booking policy checks in order and stops at the first failure:

1. appointment type exists, is active and belongs to the instructor
2. whole-minute times, duration policy (fixed or variable with increments), party size
3. no overlapping pending/confirmed appointment
4. the interval fits one availability block of its local date
5. no overlapping group-course session
6. no busy event on the instructor's external calendar (fresh lookup)

Failures are returned as ValidationResult values, never raised. A calendar
outage at step 6 lets the booking through.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    APPOINTMENT_CONFLICT_REASON,
    CALENDAR_EVENT_FALLBACK_NAME,
    COURSE_CONFLICT_REASON,
    DAY_UNAVAILABLE_REASON,
    INVALID_RANGE_REASON,
    MINUTES_PER_DAY,
    OUT_OF_WINDOW_REASON,
    PARTY_SIZE_MESSAGE,
    TYPE_NOT_FOUND_REASON,
    TYPE_WRONG_INSTRUCTOR_REASON,
    WHOLE_MINUTE_REASON,
)
from ..core.timezone_utils import (
    ensure_utc,
    get_instructor_timezone,
    to_local,
    to_local_wall_clock,
)
from ..models.appointment_type import AppointmentType
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.appointment_type_repository import AppointmentTypeRepository
from ..repositories.course_repository import CourseRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..schemas.booking import ValidationFailure, ValidationResult
from ..utils.time_utils import wall_clock_to_minutes
from .availability_resolver import AvailabilityResolver
from .base import BaseService
from .calendar_sync_service import CalendarSyncService

logger = logging.getLogger(__name__)


def on_minute_boundary(instant: datetime) -> bool:
    return instant.second == 0 and instant.microsecond == 0


def check_duration_policy(
    appointment_type: AppointmentType,
    duration_minutes: int,
) -> Optional[str]:
    """
    Check a requested duration against the type's duration mode.

    Fixed types need an exact match. Variable types need at least the
    minimum, and the excess over the minimum must be a whole number of
    increments. Unset variable fields fall back to the configured defaults.

    Returns:
        None when the duration is allowed, otherwise the rejection reason
    """
    if not appointment_type.is_variable_duration:
        if duration_minutes != appointment_type.duration_minutes:
            return (
                "Appointment duration must be exactly "
                f"{appointment_type.duration_minutes} minutes"
            )
        return None

    minimum_hours = (
        appointment_type.minimum_duration_hours or settings.default_variable_minimum_hours
    )
    increment_minutes = (
        appointment_type.duration_increment_minutes
        or settings.default_variable_increment_minutes
    )
    minimum_minutes = minimum_hours * 60

    if duration_minutes < minimum_minutes:
        return f"Appointment must be at least {minimum_hours} hours"
    if (duration_minutes - minimum_minutes) % increment_minutes != 0:
        return f"Appointment duration must be in {increment_minutes}-minute increments"
    return None


class BookingValidator(BaseService):
    """Policy engine gating every booking write."""

    def __init__(
        self,
        db: Session,
        appointment_type_repository: Optional[AppointmentTypeRepository] = None,
        appointment_repository: Optional[AppointmentRepository] = None,
        course_repository: Optional[CourseRepository] = None,
        user_repository: Optional[UserRepository] = None,
        resolver: Optional[AvailabilityResolver] = None,
        calendar_sync: Optional[CalendarSyncService] = None,
        timezone_name: Optional[str] = None,
    ):
        super().__init__(db)
        self.appointment_type_repository = (
            appointment_type_repository or RepositoryFactory.create_appointment_type_repository(db)
        )
        self.appointment_repository = (
            appointment_repository or RepositoryFactory.create_appointment_repository(db)
        )
        self.course_repository = course_repository or RepositoryFactory.create_course_repository(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.resolver = resolver or AvailabilityResolver(db)
        self.calendar_sync = calendar_sync or CalendarSyncService(db)
        self.tz = get_instructor_timezone(timezone_name)

    @BaseService.measure_operation("validate_booking")
    def validate(
        self,
        instructor_id: str,
        appointment_type_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_appointment_id: Optional[str] = None,
        *,
        party_size: Optional[int] = None,
    ) -> ValidationResult:
        """
        Validate a booking request.

        Args:
            instructor_id: Instructor being booked
            appointment_type_id: Requested appointment type
            start_time: UTC start (naive values are read as UTC)
            end_time: UTC end, exclusive
            exclude_appointment_id: Appointment to ignore when rescheduling it
            party_size: Requested party size, checked against the type maximum

        Returns:
            ValidationResult; reason is the user-facing message on failure
        """
        start_time, end_time = ensure_utc(start_time), ensure_utc(end_time)
        if end_time <= start_time:
            return ValidationResult.fail(ValidationFailure.INVALID_REQUEST, INVALID_RANGE_REASON)

        appointment_type = self.appointment_type_repository.get_by_id(
            appointment_type_id, load_relationships=False
        )
        if appointment_type is None or not appointment_type.is_active:
            return ValidationResult.fail(ValidationFailure.NOT_FOUND, TYPE_NOT_FOUND_REASON)
        if appointment_type.instructor_id != instructor_id:
            return ValidationResult.fail(ValidationFailure.NOT_FOUND, TYPE_WRONG_INSTRUCTOR_REASON)

        if not (on_minute_boundary(start_time) and on_minute_boundary(end_time)):
            return ValidationResult.fail(ValidationFailure.POLICY_VIOLATION, WHOLE_MINUTE_REASON)

        duration_minutes = int((end_time - start_time).total_seconds() // 60)
        policy_error = check_duration_policy(appointment_type, duration_minutes)
        if policy_error:
            return ValidationResult.fail(ValidationFailure.POLICY_VIOLATION, policy_error)

        max_party_size = appointment_type.max_party_size or 1
        if party_size is not None and party_size > max_party_size:
            return ValidationResult.fail(
                ValidationFailure.POLICY_VIOLATION,
                PARTY_SIZE_MESSAGE.format(max_party_size=max_party_size),
            )

        if self.appointment_repository.has_conflicting_appointment(
            instructor_id, start_time, end_time, exclude_appointment_id
        ):
            return ValidationResult.fail(ValidationFailure.CONFLICT, APPOINTMENT_CONFLICT_REASON)

        window_result = self._check_availability_window(instructor_id, start_time, end_time)
        if window_result is not None:
            return window_result

        if self.course_repository.get_sessions_for_instructor_in_range(
            instructor_id, start_time, end_time
        ):
            return ValidationResult.fail(ValidationFailure.CONFLICT, COURSE_CONFLICT_REASON)

        return self._check_external_calendar(instructor_id, start_time, end_time)

    def _check_availability_window(
        self, instructor_id: str, start_time: datetime, end_time: datetime
    ) -> Optional[ValidationResult]:
        """Fit check on the request's local date; wall-clock minutes may run past 1440."""
        local_date = to_local(start_time, self.tz).date()

        blocks = self.resolver.blocks_for_day(instructor_id, local_date)
        if not blocks:
            return ValidationResult.fail(ValidationFailure.OUT_OF_WINDOW, DAY_UNAVAILABLE_REASON)

        start_minutes = wall_clock_to_minutes(to_local_wall_clock(start_time, self.tz))
        days_spanned = (to_local(end_time, self.tz).date() - local_date).days
        end_minutes = days_spanned * MINUTES_PER_DAY + wall_clock_to_minutes(
            to_local_wall_clock(end_time, self.tz)
        )
        if not on_minute_boundary(end_time):
            # wall-clock reading truncates seconds; a partial minute still overruns
            end_minutes += 1
        if any(block.contains(start_minutes, end_minutes) for block in blocks):
            return None
        return ValidationResult.fail(ValidationFailure.OUT_OF_WINDOW, OUT_OF_WINDOW_REASON)

    def _check_external_calendar(
        self, instructor_id: str, start_time: datetime, end_time: datetime
    ) -> ValidationResult:
        instructor = self.user_repository.get_by_id(instructor_id, load_relationships=False)
        if instructor is None or not instructor.blocks_on_calendar:
            return ValidationResult.ok()

        result = self.calendar_sync.check_conflict(instructor_id, start_time, end_time)
        if not result.has_data or not result.data.has_conflict:
            return ValidationResult.ok()

        event = result.data.conflicting_event
        event_name = (event.label if event else None) or CALENDAR_EVENT_FALLBACK_NAME
        return ValidationResult.fail(
            ValidationFailure.CONFLICT,
            f"Time conflicts with {event_name} on instructor's calendar",
        )
