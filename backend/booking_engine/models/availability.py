# backend/booking_engine/models/availability.py
"""
Availability models for the booking engine.

Availability is authored as wall-clock "HH:MM" strings in the engine
timezone. WeeklyTemplate rows recur every week; AvailabilityOverride rows
are date-scoped exceptions in one of three modes:

- whole-day block: is_available false, no times
- partial block: is_available false, start_time and end_time set
- addition: is_available true, start_time and end_time set

Classes:
    WeeklyTemplate: Recurring availability for one day of the week
    AvailabilityOverride: Date-range exception to the weekly template
"""

from datetime import date
import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class WeeklyTemplate(Base):
    """Recurring weekly availability window (day_of_week 0 = Sunday)."""

    __tablename__ = "weekly_templates"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)
    requires_approval = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, server_default=func.now())

    instructor = relationship("User", backref="weekly_templates")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_weekly_templates_day_of_week"),
        Index("idx_weekly_templates_instructor_day", "instructor_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return f"<WeeklyTemplate day={self.day_of_week} {self.start_time}-{self.end_time}>"


class AvailabilityOverride(Base):
    """Date-scoped exception to an instructor's weekly template."""

    __tablename__ = "availability_overrides"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(String(8), nullable=True)
    end_time = Column(String(8), nullable=True)
    is_available = Column(Boolean, nullable=False, default=False)
    requires_approval = Column(Boolean, nullable=False, default=False)
    reason = Column(String(255), nullable=True)
    created_at = Column(UTCDateTime, server_default=func.now(), nullable=False)

    instructor = relationship("User", backref="availability_overrides")

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_availability_overrides_date_order"),
        CheckConstraint(
            "(start_time IS NULL AND end_time IS NULL) "
            "OR (start_time IS NOT NULL AND end_time IS NOT NULL)",
            name="ck_availability_overrides_time_pair",
        ),
        Index(
            "idx_availability_overrides_instructor_dates", "instructor_id", "start_date", "end_date"
        ),
    )

    @property
    def has_times(self) -> bool:
        return bool(self.start_time and self.end_time)

    @property
    def is_whole_day_block(self) -> bool:
        return not self.is_available and not self.has_times

    @property
    def is_partial_block(self) -> bool:
        return not self.is_available and self.has_times

    @property
    def is_addition(self) -> bool:
        return bool(self.is_available) and self.has_times

    def covers(self, day: date) -> bool:
        """True when this override's date range includes day."""
        return self.start_date <= day <= self.end_date

    def __repr__(self) -> str:
        window = f"{self.start_time}-{self.end_time}" if self.has_times else "all day"
        state = "available" if self.is_available else "blocked"
        return f"<AvailabilityOverride {self.start_date}..{self.end_date} {window} {state}>"
