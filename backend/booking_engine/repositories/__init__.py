"""
Repository Pattern Implementation for the booking engine.

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Lookup, insert and error wrapping shared by all repositories
- RepositoryFactory: Factory for creating repository instances
- AvailabilityRepository: Weekly templates and date overrides
- AppointmentRepository: Appointment range and overlap queries
- AppointmentTypeRepository: Active appointment types
- CourseRepository: Group-course sessions
- UserRepository: Instructors and students

Usage:
    from booking_engine.repositories import RepositoryFactory

    repository = RepositoryFactory.create_appointment_repository(db)
    busy = repository.has_conflicting_appointment(instructor_id, start, end)
"""

from .appointment_repository import AppointmentRepository
from .appointment_type_repository import AppointmentTypeRepository
from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .course_repository import CourseRepository
from .factory import RepositoryFactory
from .user_repository import UserRepository

__all__ = [
    "AppointmentRepository",
    "AppointmentTypeRepository",
    "AvailabilityRepository",
    "BaseRepository",
    "CourseRepository",
    "RepositoryFactory",
    "UserRepository",
]
