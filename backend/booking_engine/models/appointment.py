# backend/booking_engine/models/appointment.py
"""
Appointment model for the booking engine.

Appointments store their interval as UTC instants. For one instructor no two
appointments in an active status (pending, confirmed) may overlap on
[start_time, end_time). On PostgreSQL the exclusion constraint
appointments_no_overlap_per_instructor (see alembic) enforces this at the
storage layer; the booking service re-validates under an advisory lock.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Dict, FrozenSet, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
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
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class AppointmentStatus(str, Enum):
    """Appointment lifecycle statuses."""

    PENDING = "pending"  # Awaiting instructor approval
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"  # Set by a downstream process


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


ACTIVE_STATUSES: FrozenSet[str] = frozenset(
    {AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value}
)

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.REJECTED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}
    ),
    AppointmentStatus.REJECTED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


class Appointment(Base):
    """A booked interval on an instructor's timeline."""

    __tablename__ = "appointments"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    instructor_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    student_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    appointment_type_id = Column(String(26), ForeignKey("appointment_types.id"), nullable=False)

    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)

    status = Column(String(20), nullable=False, default=AppointmentStatus.PENDING.value, index=True)
    party_size = Column(Integer, nullable=False, default=1)
    student_notes = Column(Text, nullable=True)

    # Pricing snapshot
    actual_duration_minutes = Column(Integer, nullable=True)
    total_price = Column(Numeric(10, 2), nullable=True)
    tax_amount = Column(Numeric(10, 2), nullable=True)
    tax_rate = Column(Numeric(6, 4), nullable=True)

    # Payment verified upstream
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_intent_id = Column(String(255), nullable=True)
    stripe_payment_intent_id = Column(String(255), nullable=True)

    # External calendar mirror
    external_event_id = Column(String(255), nullable=True)

    # Lifecycle
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, onupdate=func.now())
    confirmed_at = Column(UTCDateTime, nullable=True)
    rejected_at = Column(UTCDateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    cancelled_at = Column(UTCDateTime, nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    instructor = relationship(
        "User", foreign_keys=[instructor_id], backref="instructor_appointments"
    )
    student = relationship("User", foreign_keys=[student_id], backref="student_appointments")
    appointment_type = relationship("AppointmentType", backref="appointments")
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
        CheckConstraint("party_size >= 1", name="ck_appointments_party_size"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'rejected', 'cancelled', 'completed')",
            name="ck_appointments_status",
        ),
        Index("idx_appointments_instructor_start", "instructor_id", "start_time"),
    )

    @property
    def status_enum(self) -> AppointmentStatus:
        return AppointmentStatus(self.status)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def can_transition_to(self, target: AppointmentStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status_enum]

    def confirm(self, when: Optional[datetime] = None) -> None:
        self.status = AppointmentStatus.CONFIRMED.value
        self.confirmed_at = when or datetime.now(timezone.utc)

    def reject(self, reason: Optional[str], when: Optional[datetime] = None) -> None:
        self.status = AppointmentStatus.REJECTED.value
        self.rejected_at = when or datetime.now(timezone.utc)
        self.rejection_reason = reason

    def cancel(
        self, cancelled_by_id: str, reason: Optional[str], when: Optional[datetime] = None
    ) -> None:
        self.status = AppointmentStatus.CANCELLED.value
        self.cancelled_at = when or datetime.now(timezone.utc)
        self.cancelled_by_id = cancelled_by_id
        self.cancellation_reason = reason

    def __repr__(self) -> str:
        return f"<Appointment {self.id} {self.start_time}-{self.end_time} {self.status}>"
