# backend/booking_engine/repositories/appointment_type_repository.py
"""
AppointmentType repository.

Active types are listed in the instructor's display order.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.appointment_type import AppointmentType
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AppointmentTypeRepository(BaseRepository[AppointmentType]):
    def __init__(self, db: Session):
        super().__init__(db, AppointmentType)

    def list_active_for_instructor(self, instructor_id: str) -> List[AppointmentType]:
        """
        Active appointment types for an instructor.

        Returns:
            Types ordered by sort_order, then title
        """
        try:
            return (
                self.db.query(AppointmentType)
                .filter(
                    AppointmentType.instructor_id == instructor_id,
                    AppointmentType.is_active.is_(True),
                )
                .order_by(AppointmentType.sort_order, AppointmentType.title)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing appointment types: {str(e)}")
            raise RepositoryException(f"Failed to list appointment types: {str(e)}")
