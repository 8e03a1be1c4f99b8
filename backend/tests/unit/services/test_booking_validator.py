"""Booking validation order and failure codes."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from booking_engine.core.constants import (
    APPOINTMENT_CONFLICT_REASON,
    COURSE_CONFLICT_REASON,
    DAY_UNAVAILABLE_REASON,
    INVALID_RANGE_REASON,
    OUT_OF_WINDOW_REASON,
    TYPE_NOT_FOUND_REASON,
    TYPE_WRONG_INSTRUCTOR_REASON,
    WHOLE_MINUTE_REASON,
)
from booking_engine.schemas.availability import AvailabilityBlock
from booking_engine.schemas.booking import ValidationFailure
from booking_engine.schemas.calendar import BusyInterval, CalendarConflictCheck, CalendarResult
from booking_engine.services.booking_validator import BookingValidator, on_minute_boundary


def _utc(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 1, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def appointment_type():
    appointment_type = MagicMock()
    appointment_type.is_active = True
    appointment_type.instructor_id = "inst-1"
    appointment_type.is_variable_duration = False
    appointment_type.duration_minutes = 60
    appointment_type.max_party_size = 2
    return appointment_type


@pytest.fixture
def instructor():
    instructor = MagicMock()
    instructor.blocks_on_calendar = False
    return instructor


@pytest.fixture
def validator(db, appointment_type, instructor):
    type_repository = MagicMock()
    type_repository.get_by_id.return_value = appointment_type
    appointment_repository = MagicMock()
    appointment_repository.has_conflicting_appointment.return_value = False
    course_repository = MagicMock()
    course_repository.get_sessions_for_instructor_in_range.return_value = []
    user_repository = MagicMock()
    user_repository.get_by_id.return_value = instructor
    resolver = MagicMock()
    resolver.blocks_for_day.return_value = [
        AvailabilityBlock(day_of_week=1, start_time="09:00", end_time="17:00")
    ]
    calendar_sync = MagicMock()
    calendar_sync.check_conflict.return_value = CalendarResult.empty()

    return BookingValidator(
        db,
        appointment_type_repository=type_repository,
        appointment_repository=appointment_repository,
        course_repository=course_repository,
        user_repository=user_repository,
        resolver=resolver,
        calendar_sync=calendar_sync,
        timezone_name="UTC",
    )


class TestValidate:
    def test_valid_request(self, validator):
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert result.valid
        assert result.code is None

    def test_inverted_range(self, validator):
        result = validator.validate("inst-1", "type-1", _utc(5, 10), _utc(5, 9))
        assert (result.code, result.reason) == (
            ValidationFailure.INVALID_REQUEST,
            INVALID_RANGE_REASON,
        )

    def test_missing_type(self, validator):
        validator.appointment_type_repository.get_by_id.return_value = None
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert (result.code, result.reason) == (ValidationFailure.NOT_FOUND, TYPE_NOT_FOUND_REASON)

    def test_inactive_type(self, validator, appointment_type):
        appointment_type.is_active = False
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert result.code == ValidationFailure.NOT_FOUND

    def test_type_of_another_instructor(self, validator):
        result = validator.validate("inst-2", "type-1", _utc(5, 9), _utc(5, 10))
        assert (result.code, result.reason) == (
            ValidationFailure.NOT_FOUND,
            TYPE_WRONG_INSTRUCTOR_REASON,
        )

    def test_duration_policy(self, validator):
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 9, 30))
        assert result.code == ValidationFailure.POLICY_VIOLATION
        assert result.reason == "Appointment duration must be exactly 60 minutes"

    def test_fixed_duration_with_extra_seconds(self, validator):
        end = _utc(5, 10) + timedelta(seconds=30)
        result = validator.validate("inst-1", "type-1", _utc(5, 9), end)
        assert (result.code, result.reason) == (
            ValidationFailure.POLICY_VIOLATION,
            WHOLE_MINUTE_REASON,
        )

    def test_variable_duration_with_extra_seconds(self, validator, appointment_type):
        appointment_type.is_variable_duration = True
        appointment_type.minimum_duration_hours = 2
        appointment_type.duration_increment_minutes = 60
        end = _utc(5, 11) + timedelta(seconds=30)

        result = validator.validate("inst-1", "type-1", _utc(5, 9), end)

        assert result.code == ValidationFailure.POLICY_VIOLATION
        assert validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 11)).valid

    def test_start_between_minutes(self, validator):
        half_minute = timedelta(seconds=30)
        result = validator.validate(
            "inst-1", "type-1", _utc(5, 16) + half_minute, _utc(5, 17) + half_minute
        )
        assert (result.code, result.reason) == (
            ValidationFailure.POLICY_VIOLATION,
            WHOLE_MINUTE_REASON,
        )

    def test_window_check_counts_partial_minute_at_block_end(self, validator):
        overrun = _utc(5, 17) + timedelta(microseconds=1)
        result = validator._check_availability_window("inst-1", _utc(5, 16), overrun)
        assert result.code == ValidationFailure.OUT_OF_WINDOW
        assert validator._check_availability_window("inst-1", _utc(5, 16), _utc(5, 17)) is None

    def test_party_size_over_maximum(self, validator):
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10), party_size=3)
        assert result.code == ValidationFailure.POLICY_VIOLATION
        assert "maximum of 2" in result.reason

    def test_overlapping_appointment(self, validator):
        validator.appointment_repository.has_conflicting_appointment.return_value = True
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert (result.code, result.reason) == (
            ValidationFailure.CONFLICT,
            APPOINTMENT_CONFLICT_REASON,
        )

    def test_excluded_appointment_passed_through(self, validator):
        validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10), "appt-1")
        validator.appointment_repository.has_conflicting_appointment.assert_called_once_with(
            "inst-1", _utc(5, 9), _utc(5, 10), "appt-1"
        )

    def test_day_without_availability(self, validator):
        validator.resolver.blocks_for_day.return_value = []
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert (result.code, result.reason) == (
            ValidationFailure.OUT_OF_WINDOW,
            DAY_UNAVAILABLE_REASON,
        )

    def test_interval_past_block_end(self, validator):
        result = validator.validate("inst-1", "type-1", _utc(5, 16, 30), _utc(5, 17, 30))
        assert (result.code, result.reason) == (
            ValidationFailure.OUT_OF_WINDOW,
            OUT_OF_WINDOW_REASON,
        )

    def test_interval_spanning_two_blocks_rejected(self, validator):
        validator.resolver.blocks_for_day.return_value = [
            AvailabilityBlock(day_of_week=1, start_time="09:00", end_time="12:00"),
            AvailabilityBlock(day_of_week=1, start_time="12:00", end_time="17:00"),
        ]
        result = validator.validate("inst-1", "type-1", _utc(5, 11, 30), _utc(5, 12, 30))
        assert result.code == ValidationFailure.OUT_OF_WINDOW

    def test_block_ending_at_midnight(self, validator):
        validator.resolver.blocks_for_day.return_value = [
            AvailabilityBlock(day_of_week=1, start_time="22:00", end_time="24:00")
        ]
        assert validator.validate("inst-1", "type-1", _utc(5, 23), _utc(6, 0)).valid
        result = validator.validate("inst-1", "type-1", _utc(5, 23, 30), _utc(6, 0, 30))
        assert result.code == ValidationFailure.OUT_OF_WINDOW

    def test_course_session_conflict(self, validator):
        validator.course_repository.get_sessions_for_instructor_in_range.return_value = [
            MagicMock()
        ]
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert (result.code, result.reason) == (ValidationFailure.CONFLICT, COURSE_CONFLICT_REASON)


class TestExternalCalendar:
    def test_not_checked_without_blocking(self, validator):
        validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        validator.calendar_sync.check_conflict.assert_not_called()

    def test_busy_event_rejects_booking(self, validator, instructor):
        instructor.blocks_on_calendar = True
        validator.calendar_sync.check_conflict.return_value = CalendarResult.ok(
            CalendarConflictCheck(
                has_conflict=True,
                conflicting_event=BusyInterval(start=_utc(5, 9), end=_utc(5, 11), label="Dentist"),
            )
        )
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert result.code == ValidationFailure.CONFLICT
        assert result.reason == "Time conflicts with Dentist on instructor's calendar"

    def test_unlabelled_busy_event(self, validator, instructor):
        instructor.blocks_on_calendar = True
        validator.calendar_sync.check_conflict.return_value = CalendarResult.ok(
            CalendarConflictCheck(
                has_conflict=True,
                conflicting_event=BusyInterval(start=_utc(5, 9), end=_utc(5, 11)),
            )
        )
        result = validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10))
        assert result.reason == "Time conflicts with a calendar event on instructor's calendar"

    def test_calendar_failure_fails_open(self, validator, instructor):
        instructor.blocks_on_calendar = True
        validator.calendar_sync.check_conflict.return_value = CalendarResult.failed("timeout")
        assert validator.validate("inst-1", "type-1", _utc(5, 9), _utc(5, 10)).valid


def test_on_minute_boundary():
    assert on_minute_boundary(_utc(5, 9))
    assert not on_minute_boundary(_utc(5, 9) + timedelta(seconds=1))
    assert not on_minute_boundary(_utc(5, 9) + timedelta(microseconds=1))
