"""Cutting availability blocks into flagged slots."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from booking_engine.core.constants import UNAVAILABLE_SLOT_REASON
from booking_engine.core.exceptions import ValidationException
from booking_engine.schemas.availability import AvailabilityBlock
from booking_engine.schemas.conflict import Conflict, ConflictSource
from booking_engine.services.slot_generator import SlotGenerator

MONDAY = date(2026, 1, 5)


def _utc(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def _block(start: str, end: str, day_of_week: int = 1, **kwargs) -> AvailabilityBlock:
    return AvailabilityBlock(day_of_week=day_of_week, start_time=start, end_time=end, **kwargs)


@pytest.fixture
def appointment_type():
    appointment_type = MagicMock()
    appointment_type.is_active = True
    appointment_type.instructor_id = "inst-1"
    return appointment_type


@pytest.fixture
def resolver():
    resolver = MagicMock()
    resolver.resolve.return_value = {
        "2026-01-05": [_block("09:00", "12:00"), _block("13:00", "17:00")]
    }
    return resolver


@pytest.fixture
def aggregator():
    aggregator = MagicMock()
    aggregator.conflicts.return_value = []
    return aggregator


@pytest.fixture
def generator(db, resolver, aggregator, appointment_type):
    type_repository = MagicMock()
    type_repository.get_by_id.return_value = appointment_type
    return SlotGenerator(
        db,
        resolver=resolver,
        aggregator=aggregator,
        appointment_type_repository=type_repository,
        timezone_name="UTC",
    )


class TestGenerateSlots:
    def test_slots_never_straddle_blocks(self, generator):
        slots = generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, 60)

        starts = [slot.start_time.hour for slot in slots]
        assert starts == [9, 10, 11, 13, 14, 15, 16]
        assert all(slot.is_available for slot in slots)
        assert all(slot.duration_minutes == 60 for slot in slots)

    def test_short_remainder_dropped(self, generator, resolver):
        resolver.resolve.return_value = {"2026-01-05": [_block("09:00", "10:30")]}
        slots = generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, 60)
        assert [(slot.start_time, slot.end_time) for slot in slots] == [
            (_utc(MONDAY, 9), _utc(MONDAY, 10))
        ]

    def test_conflicting_slot_flagged(self, generator, aggregator):
        aggregator.conflicts.return_value = [
            Conflict(
                start_time=_utc(MONDAY, 10, 30),
                end_time=_utc(MONDAY, 11),
                source=ConflictSource.APPOINTMENT,
            )
        ]
        slots = generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, 60)

        unavailable = [slot for slot in slots if not slot.is_available]
        assert [slot.start_time.hour for slot in unavailable] == [10]
        assert unavailable[0].reason == UNAVAILABLE_SLOT_REASON

    def test_slot_ending_at_conflict_start_is_available(self, generator, aggregator):
        aggregator.conflicts.return_value = [
            Conflict(
                start_time=_utc(MONDAY, 10),
                end_time=_utc(MONDAY, 11),
                source=ConflictSource.COURSE,
                label="Group Theory",
            )
        ]
        slots = generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, 60)
        by_hour = {slot.start_time.hour: slot.is_available for slot in slots}
        assert by_hour[9] is True
        assert by_hour[10] is False
        assert by_hour[11] is True

    def test_approval_flag_copied_from_block(self, generator, resolver):
        resolver.resolve.return_value = {
            "2026-01-05": [_block("18:00", "19:00", requires_approval=True)]
        }
        slots = generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, 30)
        assert len(slots) == 2
        assert all(slot.requires_approval for slot in slots)

    def test_inactive_type_yields_no_slots(self, generator, appointment_type, resolver):
        appointment_type.is_active = False
        assert generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, 60) == []
        resolver.resolve.assert_not_called()

    def test_other_instructors_type_yields_no_slots(self, generator, appointment_type):
        appointment_type.instructor_id = "inst-2"
        assert generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, 60) == []

    @pytest.mark.parametrize("duration", [0, -15])
    def test_non_positive_duration_rejected(self, generator, duration):
        with pytest.raises(ValidationException):
            generator.generate_slots("inst-1", "type-1", MONDAY, MONDAY, duration)

    def test_inverted_range_rejected(self, generator):
        with pytest.raises(ValidationException):
            generator.generate_slots("inst-1", "type-1", MONDAY, date(2026, 1, 4), 60)


class TestDaylightSaving:
    def test_block_in_spring_forward_gap_skipped(self, db, aggregator, appointment_type):
        spring_forward = date(2024, 3, 10)
        resolver = MagicMock()
        resolver.resolve.return_value = {
            "2024-03-10": [
                _block("02:00", "03:00", day_of_week=0),
                _block("09:00", "10:00", day_of_week=0),
            ]
        }
        type_repository = MagicMock()
        type_repository.get_by_id.return_value = appointment_type
        generator = SlotGenerator(
            db,
            resolver=resolver,
            aggregator=aggregator,
            appointment_type_repository=type_repository,
            timezone_name="America/Denver",
        )

        slots = generator.generate_slots("inst-1", "type-1", spring_forward, spring_forward, 60)

        # 09:00 MDT is 15:00 UTC
        assert [(slot.start_time.hour, slot.end_time.hour) for slot in slots] == [(15, 16)]
