# backend/booking_engine/services/availability_resolver.py
"""
Availability Resolver for the booking engine.

Derives the bookable blocks of every day in a range by layering the weekly
template with that day's overrides, in a fixed order:

1. a whole-day block empties the day
2. partial blocks are subtracted from template blocks
3. additions are appended as extra blocks

Additions are never cut by partial blocks of the same day. Overrides are
applied in (created_at, id) order, which the repository guarantees.
"""

from collections import defaultdict
from datetime import date
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..models.availability import AvailabilityOverride, WeeklyTemplate
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilityBlock
from ..utils.intervals import date_key, day_of_week, iter_days, subtract_interval
from .base import BaseService

logger = logging.getLogger(__name__)


def resolve_day(
    day: date,
    templates: Iterable[WeeklyTemplate],
    overrides: Sequence[AvailabilityOverride],
) -> List[AvailabilityBlock]:
    """
    Bookable blocks for one day.

    Args:
        day: Local calendar date
        templates: Active weekly templates for the day's weekday
        overrides: Overrides covering the day, in application order

    Returns:
        Template-derived blocks (after removals) followed by additions
    """
    if any(override.is_whole_day_block for override in overrides):
        return []

    weekday = day_of_week(day)
    blocks: List[AvailabilityBlock] = []
    for template in templates:
        try:
            blocks.append(
                AvailabilityBlock(
                    day_of_week=weekday,
                    start_time=template.start_time,
                    end_time=template.end_time,
                    requires_approval=bool(template.requires_approval),
                    source="template",
                )
            )
        except ValueError as exc:
            logger.warning(f"Skipping malformed weekly template {template.id}: {exc}")

    for override in overrides:
        if not override.is_partial_block:
            continue
        try:
            remaining: List[AvailabilityBlock] = []
            for block in blocks:
                remaining.extend(subtract_interval(block, override.start_time, override.end_time))
        except ValueError as exc:
            logger.warning(f"Skipping malformed override {override.id}: {exc}")
            continue
        blocks = remaining

    for override in overrides:
        if not override.is_addition:
            continue
        try:
            blocks.append(
                AvailabilityBlock(
                    day_of_week=weekday,
                    start_time=override.start_time,
                    end_time=override.end_time,
                    requires_approval=bool(override.requires_approval),
                    source="override",
                )
            )
        except ValueError as exc:
            logger.warning(f"Skipping malformed override {override.id}: {exc}")

    return blocks


class AvailabilityResolver(BaseService):
    """
    Resolves weekly templates and overrides into concrete availability blocks.

    Read-only; safe to call concurrently.
    """

    def __init__(self, db: Session, repository: Optional[AvailabilityRepository] = None):
        """
        Initialize availability resolver.

        Args:
            db: Database session
            repository: Optional AvailabilityRepository instance
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)

    @BaseService.measure_operation("resolve_availability")
    def resolve(
        self, instructor_id: str, start_date: date, end_date: date
    ) -> Dict[str, List[AvailabilityBlock]]:
        """
        Availability blocks for each day of an inclusive date range.

        Args:
            instructor_id: Instructor whose availability to resolve
            start_date: First local date
            end_date: Last local date (inclusive)

        Returns:
            Mapping of ISO date -> blocks, with an entry for every day

        Raises:
            ValidationException: If end_date is before start_date
        """
        if end_date < start_date:
            raise ValidationException("End date must not be before start date")

        templates_by_day: Dict[int, List[WeeklyTemplate]] = defaultdict(list)
        for template in self.repository.get_active_templates(instructor_id):
            templates_by_day[template.day_of_week].append(template)

        overrides = self.repository.get_overrides_in_range(instructor_id, start_date, end_date)

        return {
            date_key(day): resolve_day(
                day,
                templates_by_day.get(day_of_week(day), []),
                [override for override in overrides if override.covers(day)],
            )
            for day in iter_days(start_date, end_date)
        }

    def blocks_for_day(self, instructor_id: str, day: date) -> List[AvailabilityBlock]:
        """Availability blocks for a single local date."""
        templates = self.repository.get_active_templates_for_day(instructor_id, day_of_week(day))
        overrides = self.repository.get_overrides_in_range(instructor_id, day, day)
        return resolve_day(day, templates, overrides)
