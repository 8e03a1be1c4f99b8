# backend/booking_engine/models/user.py
"""
User model for the booking engine.

Instructors and students share one table. Only the attributes the booking
engine reads are modelled: contact details for calendar mirroring and the
external-calendar connection flags.
"""

import logging

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """An instructor or student."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String(30), nullable=True)
    is_instructor = Column(Boolean, nullable=False, default=False)

    # External calendar connection
    calendar_connected = Column(Boolean, nullable=False, default=False)
    calendar_blocking_enabled = Column(Boolean, nullable=False, default=False)
    calendar_sync_enabled = Column(Boolean, nullable=False, default=False)
    calendar_primary_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def blocks_on_calendar(self) -> bool:
        """External busy times count as conflicts for this instructor."""
        return bool(self.calendar_connected and self.calendar_blocking_enabled)

    @property
    def mirrors_to_calendar(self) -> bool:
        """Bookings are copied into this instructor's external calendar."""
        return bool(self.calendar_connected and self.calendar_sync_enabled)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
