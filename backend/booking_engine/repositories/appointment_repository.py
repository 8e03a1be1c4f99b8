# backend/booking_engine/repositories/appointment_repository.py
"""
Appointment Repository for the booking engine.

Range and overlap queries over an instructor's appointments. All interval
comparisons are half-open: an appointment ending at T does not overlap one
starting at T.
"""

from datetime import datetime
import logging
from typing import Any, Iterable, List, Optional
import zlib

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import BookingConflictException, RepositoryException
from ..models.appointment import ACTIVE_STATUSES, Appointment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AppointmentRepository(BaseRepository[Appointment]):
    def __init__(self, db: Session):
        super().__init__(db, Appointment)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Appointment.appointment_type),
            joinedload(Appointment.student),
            joinedload(Appointment.instructor),
        )

    def create(self, **kwargs: Any) -> Appointment:
        """
        Insert an appointment.

        Raises:
            BookingConflictException: If the storage-level overlap constraint rejects the row
            RepositoryException: For any other store failure
        """
        try:
            appointment = Appointment(**kwargs)
            self.db.add(appointment)
            self.db.flush()
            return appointment
        except IntegrityError as exc:
            self.logger.warning("Appointment insert rejected by constraint: %s", exc)
            raise BookingConflictException(
                details={"instructor_id": kwargs.get("instructor_id")}
            ) from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating appointment: {str(e)}")
            raise RepositoryException(f"Failed to create appointment: {str(e)}")

    def flush(self) -> None:
        """Flush pending changes; an overlap rejected by the store is a booking conflict."""
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.logger.warning("Appointment update rejected by constraint: %s", exc)
            raise BookingConflictException() from exc

    def get_by_instructor_in_range(
        self,
        instructor_id: str,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Appointment]:
        """
        Appointments intersecting [start, end), ordered by start time.

        Args:
            statuses: Status filter; defaults to the active statuses
        """
        status_filter = list(statuses) if statuses is not None else list(ACTIVE_STATUSES)
        try:
            return (
                self.db.query(Appointment)
                .filter(
                    Appointment.instructor_id == instructor_id,
                    Appointment.status.in_(status_filter),
                    Appointment.start_time < end,
                    Appointment.end_time > start,
                )
                .order_by(Appointment.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting appointments in range: {str(e)}")
            raise RepositoryException(f"Failed to get appointments: {str(e)}")

    def has_conflicting_appointment(
        self,
        instructor_id: str,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[str] = None,
    ) -> bool:
        """True when an active appointment overlaps [start, end)."""
        try:
            query = self.db.query(Appointment.id).filter(
                Appointment.instructor_id == instructor_id,
                Appointment.status.in_(list(ACTIVE_STATUSES)),
                Appointment.start_time < end,
                Appointment.end_time > start,
            )
            if exclude_appointment_id:
                query = query.filter(Appointment.id != exclude_appointment_id)
            return query.first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking appointment conflicts: {str(e)}")
            raise RepositoryException(f"Failed to check appointment conflicts: {str(e)}")

    def lock_instructor_timeline(self, instructor_id: str) -> None:
        """
        Serialize writers on one instructor's timeline until the transaction ends.

        Takes a PostgreSQL transaction-scoped advisory lock; other dialects
        rely on the store's own write serialization.
        """
        if self.dialect_name != "postgresql":
            return
        key = zlib.crc32(instructor_id.encode("utf-8"))
        try:
            self.db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking instructor timeline: {str(e)}")
            raise RepositoryException(f"Failed to lock instructor timeline: {str(e)}")
