# backend/booking_engine/services/slot_generator.py
"""
Slot Generator for the booking engine.

Cuts each resolved availability block into back-to-back slots of the
requested length and flags each slot against the conflict timeline. Slots
never straddle a block boundary and a trailing remainder shorter than the
slot length is dropped.
"""

from datetime import date, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import UNAVAILABLE_SLOT_REASON
from ..core.exceptions import NonexistentLocalTimeError, ValidationException
from ..core.timezone_utils import get_instructor_timezone, local_wall_clock_to_utc
from ..repositories.appointment_type_repository import AppointmentTypeRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import TimeSlot
from ..utils.intervals import date_key, iter_days
from .availability_resolver import AvailabilityResolver
from .base import BaseService
from .conflict_aggregator import ConflictAggregator, find_overlapping

logger = logging.getLogger(__name__)


class SlotGenerator(BaseService):
    """Lists candidate slots for browsing an instructor's availability."""

    def __init__(
        self,
        db: Session,
        resolver: Optional[AvailabilityResolver] = None,
        aggregator: Optional[ConflictAggregator] = None,
        appointment_type_repository: Optional[AppointmentTypeRepository] = None,
        timezone_name: Optional[str] = None,
    ):
        super().__init__(db)
        self.resolver = resolver or AvailabilityResolver(db)
        self.aggregator = aggregator or ConflictAggregator(db, timezone_name=timezone_name)
        self.appointment_type_repository = (
            appointment_type_repository or RepositoryFactory.create_appointment_type_repository(db)
        )
        self.tz = get_instructor_timezone(timezone_name)

    @BaseService.measure_operation("generate_slots")
    def generate_slots(
        self,
        instructor_id: str,
        appointment_type_id: str,
        start_date: date,
        end_date: date,
        slot_duration_minutes: int,
    ) -> List[TimeSlot]:
        """
        Candidate slots for every block of every day in the range.

        Args:
            instructor_id: Instructor being browsed
            appointment_type_id: Type being booked; inactive or unknown yields []
            start_date: First local date
            end_date: Last local date (inclusive)
            slot_duration_minutes: Length of each slot and the step between slots

        Returns:
            Slots in chronological order per block, availability flagged

        Raises:
            ValidationException: If the duration is not positive or the range is inverted
        """
        if slot_duration_minutes <= 0:
            raise ValidationException("Slot duration must be positive")
        if end_date < start_date:
            raise ValidationException("End date must not be before start date")

        appointment_type = self.appointment_type_repository.get_by_id(
            appointment_type_id, load_relationships=False
        )
        if (
            appointment_type is None
            or not appointment_type.is_active
            or appointment_type.instructor_id != instructor_id
        ):
            self.logger.debug(
                f"No slots: appointment type {appointment_type_id} unavailable for {instructor_id}"
            )
            return []

        availability = self.resolver.resolve(instructor_id, start_date, end_date)
        conflicts = self.aggregator.conflicts(instructor_id, start_date, end_date)
        step = timedelta(minutes=slot_duration_minutes)

        slots: List[TimeSlot] = []
        for day in iter_days(start_date, end_date):
            for block in availability.get(date_key(day), []):
                try:
                    block_start = local_wall_clock_to_utc(day, block.start_time, self.tz)
                    block_end = local_wall_clock_to_utc(day, block.end_time, self.tz)
                except NonexistentLocalTimeError as exc:
                    self.logger.warning(
                        f"Skipping block {block.start_time}-{block.end_time} on {day}: "
                        f"{exc.message}"
                    )
                    continue

                cursor = block_start
                while cursor + step <= block_end:
                    slot_end = cursor + step
                    conflict = find_overlapping(conflicts, cursor, slot_end)
                    slots.append(
                        TimeSlot(
                            start_time=cursor,
                            end_time=slot_end,
                            is_available=conflict is None,
                            requires_approval=block.requires_approval,
                            reason=UNAVAILABLE_SLOT_REASON if conflict is not None else None,
                        )
                    )
                    cursor = slot_end

        return slots
