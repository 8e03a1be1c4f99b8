# backend/booking_engine/repositories/availability_repository.py
"""
Availability Repository for the booking engine.

Data access for weekly templates and date overrides. Overrides come back in
a deterministic (created_at, id) order so the resolver applies them the same
way on every call.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import AvailabilityOverride, WeeklyTemplate
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[WeeklyTemplate]):
    """
    Repository for template and override queries.

    WeeklyTemplate is the primary model; overrides are queried directly.
    """

    def __init__(self, db: Session):
        super().__init__(db, WeeklyTemplate)

    # Weekly templates

    def get_active_templates_for_day(
        self, instructor_id: str, day_of_week: int
    ) -> List[WeeklyTemplate]:
        """Active templates for one day of the week, ordered by start time."""
        try:
            return (
                self.db.query(WeeklyTemplate)
                .filter(
                    WeeklyTemplate.instructor_id == instructor_id,
                    WeeklyTemplate.day_of_week == day_of_week,
                    WeeklyTemplate.is_active.is_(True),
                )
                .order_by(WeeklyTemplate.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting templates for day {day_of_week}: {str(e)}")
            raise RepositoryException(f"Failed to get weekly templates: {str(e)}")

    def get_active_templates(self, instructor_id: str) -> List[WeeklyTemplate]:
        """All active templates for an instructor, ordered by day and start time."""
        try:
            return (
                self.db.query(WeeklyTemplate)
                .filter(
                    WeeklyTemplate.instructor_id == instructor_id,
                    WeeklyTemplate.is_active.is_(True),
                )
                .order_by(WeeklyTemplate.day_of_week, WeeklyTemplate.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting weekly templates: {str(e)}")
            raise RepositoryException(f"Failed to get weekly templates: {str(e)}")

    def create_template(
        self,
        instructor_id: str,
        day_of_week: int,
        start_time: str,
        end_time: str,
        requires_approval: bool = False,
    ) -> WeeklyTemplate:
        return self.create(
            instructor_id=instructor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            requires_approval=requires_approval,
        )

    # Overrides

    def get_overrides_in_range(
        self, instructor_id: str, start_date: date, end_date: date
    ) -> List[AvailabilityOverride]:
        """
        Overrides whose date range intersects [start_date, end_date].

        Returns:
            Overrides ordered by (created_at, id)
        """
        try:
            return (
                self.db.query(AvailabilityOverride)
                .filter(
                    AvailabilityOverride.instructor_id == instructor_id,
                    AvailabilityOverride.start_date <= end_date,
                    AvailabilityOverride.end_date >= start_date,
                )
                .order_by(AvailabilityOverride.created_at, AvailabilityOverride.id)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting overrides: {str(e)}")
            raise RepositoryException(f"Failed to get availability overrides: {str(e)}")

    def create_override(
        self,
        instructor_id: str,
        start_date: date,
        end_date: Optional[date] = None,
        *,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        is_available: bool = False,
        requires_approval: bool = False,
        reason: Optional[str] = None,
    ) -> AvailabilityOverride:
        try:
            override = AvailabilityOverride(
                instructor_id=instructor_id,
                start_date=start_date,
                end_date=end_date or start_date,
                start_time=start_time,
                end_time=end_time,
                is_available=is_available,
                requires_approval=requires_approval,
                reason=reason,
            )
            self.db.add(override)
            self.db.flush()
            return override
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating override: {str(e)}")
            raise RepositoryException(f"Failed to create availability override: {str(e)}")
