# backend/booking_engine/services/appointment_type_service.py
"""Appointment type listing for the booking surface."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.appointment_type import AppointmentType
from ..repositories.appointment_type_repository import AppointmentTypeRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class AppointmentTypeService(BaseService):
    def __init__(self, db: Session, repository: Optional[AppointmentTypeRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_appointment_type_repository(db)

    @BaseService.measure_operation("list_active_types")
    def list_active_types(self, instructor_id: str) -> List[AppointmentType]:
        """Active types in the instructor's display order (sort_order, then title)."""
        return self.repository.list_active_for_instructor(instructor_id)

    def get_active_type(self, appointment_type_id: str) -> AppointmentType:
        """
        Load an active appointment type.

        Raises:
            NotFoundException: If the type is unknown or inactive
        """
        appointment_type = self.repository.get_by_id(appointment_type_id, load_relationships=False)
        if appointment_type is None or not appointment_type.is_active:
            raise NotFoundException(
                "Appointment type not found", details={"appointment_type_id": appointment_type_id}
            )
        return appointment_type
