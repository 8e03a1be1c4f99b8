# backend/booking_engine/models/appointment_type.py
"""
Appointment type model for the booking engine.

An appointment type carries the duration policy a booking is validated
against. Exactly one duration mode applies:

- fixed: duration_minutes is set and a booking must last exactly that long
- variable: duration_minutes is null; a booking lasts at least
  minimum_duration_hours and grows in duration_increment_minutes steps

Types are soft-disabled through is_active rather than deleted while
appointments reference them.
"""

from decimal import Decimal
import logging
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class DurationMode:
    FIXED = "fixed"
    VARIABLE = "variable"


class AppointmentType(Base):
    """Bookable offering with its duration, approval and pricing policy."""

    __tablename__ = "appointment_types"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    instructor_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Fixed mode
    duration_minutes = Column(Integer, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)

    # Variable mode
    is_variable_duration = Column(Boolean, nullable=False, default=False)
    minimum_duration_hours = Column(Integer, nullable=True)
    duration_increment_minutes = Column(Integer, nullable=True)
    price_per_hour = Column(Numeric(10, 2), nullable=True)

    # Stored for display; conflict intervals are not widened by buffers
    buffer_before_minutes = Column(Integer, nullable=False, default=0)
    buffer_after_minutes = Column(Integer, nullable=False, default=0)

    max_party_size = Column(Integer, nullable=False, default=1)
    requires_approval = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    instructor = relationship("User", backref="appointment_types")

    __table_args__ = (
        CheckConstraint(
            "(is_variable_duration = false AND duration_minutes IS NOT NULL) "
            "OR (is_variable_duration = true AND duration_minutes IS NULL)",
            name="ck_appointment_types_single_duration_mode",
        ),
        CheckConstraint("max_party_size >= 1", name="ck_appointment_types_party_size"),
        Index("idx_appointment_types_instructor_active", "instructor_id", "is_active"),
    )

    @property
    def duration_mode(self) -> str:
        return DurationMode.VARIABLE if self.is_variable_duration else DurationMode.FIXED

    def unit_price(self) -> Optional[Decimal]:
        return self.price_per_hour if self.is_variable_duration else self.price

    def __repr__(self) -> str:
        return f"<AppointmentType {self.title} ({self.duration_mode})>"
