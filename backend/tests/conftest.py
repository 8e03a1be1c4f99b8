# backend/tests/conftest.py
"""
Shared fixtures for the booking engine test suite.

Each test gets a fresh in-memory SQLite database. Services that talk to the
external calendar are built with a NullCalendarProvider unless a test
injects its own provider.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from booking_engine.core.timezone_utils import get_instructor_timezone, local_wall_clock_to_utc
from booking_engine.database import Base
from booking_engine.events.publisher import EventPublisher
from booking_engine.integrations.calendar_provider import NullCalendarProvider
from booking_engine.models import AppointmentType, User, WeeklyTemplate
from booking_engine.services.booking_service import BookingService
from booking_engine.services.booking_validator import BookingValidator
from booking_engine.services.calendar_sync_service import CalendarSyncService

TEST_TIMEZONE = "America/Denver"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def tz_name() -> str:
    return TEST_TIMEZONE


@pytest.fixture
def at(tz_name) -> Callable[[date, str], datetime]:
    """Build the UTC instant of a wall-clock time on a local date."""
    tz = get_instructor_timezone(tz_name)

    def _at(day: date, wall_clock: str) -> datetime:
        return local_wall_clock_to_utc(day, wall_clock, tz)

    return _at


@pytest.fixture
def instructor(db) -> User:
    user = User(email="instructor@example.com", name="Jordan Rivera", is_instructor=True)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def student(db) -> User:
    user = User(email="student@example.com", name="Sam Lee", phone="555-0100")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def lesson_type(db, instructor) -> AppointmentType:
    """Fixed 60-minute lesson, instantly confirmed."""
    appointment_type = AppointmentType(
        instructor_id=instructor.id,
        title="Piano Lesson",
        duration_minutes=60,
        price=Decimal("50.00"),
        is_variable_duration=False,
        max_party_size=1,
        requires_approval=False,
        is_active=True,
    )
    db.add(appointment_type)
    db.commit()
    return appointment_type


@pytest.fixture
def approval_type(db, instructor) -> AppointmentType:
    """Fixed 60-minute consultation the instructor must approve."""
    appointment_type = AppointmentType(
        instructor_id=instructor.id,
        title="Consultation",
        duration_minutes=60,
        price=Decimal("80.00"),
        is_variable_duration=False,
        max_party_size=3,
        requires_approval=True,
        is_active=True,
    )
    db.add(appointment_type)
    db.commit()
    return appointment_type


@pytest.fixture
def workshop_type(db, instructor) -> AppointmentType:
    """Variable duration: at least 2 hours in 60-minute steps, billed hourly."""
    appointment_type = AppointmentType(
        instructor_id=instructor.id,
        title="Workshop",
        duration_minutes=None,
        is_variable_duration=True,
        minimum_duration_hours=2,
        duration_increment_minutes=60,
        price_per_hour=Decimal("40.00"),
        max_party_size=1,
        is_active=True,
    )
    db.add(appointment_type)
    db.commit()
    return appointment_type


@pytest.fixture
def weekday_templates(db, instructor):
    """09:00-17:00 on Monday through Friday (day_of_week 1-5)."""
    templates = [
        WeeklyTemplate(
            instructor_id=instructor.id,
            day_of_week=day,
            start_time="09:00",
            end_time="17:00",
            is_active=True,
        )
        for day in range(1, 6)
    ]
    db.add_all(templates)
    db.commit()
    return templates


@pytest.fixture
def calendar_sync(db) -> CalendarSyncService:
    return CalendarSyncService(db, provider=NullCalendarProvider())


@pytest.fixture
def dispatcher() -> Mock:
    return Mock()


@pytest.fixture
def booking_service(db, calendar_sync, dispatcher, tz_name) -> BookingService:
    validator = BookingValidator(db, calendar_sync=calendar_sync, timezone_name=tz_name)
    return BookingService(
        db,
        validator=validator,
        calendar_sync=calendar_sync,
        event_publisher=EventPublisher(dispatcher=dispatcher),
    )
