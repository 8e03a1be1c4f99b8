"""Course session and appointment type queries on SQLite."""

from datetime import date, datetime, timezone
from decimal import Decimal

from booking_engine.models.appointment_type import AppointmentType
from booking_engine.models.course import Course
from booking_engine.repositories.factory import RepositoryFactory

MONDAY = date(2026, 1, 5)


def _utc(hour: int) -> datetime:
    return datetime(2026, 1, 5, hour, tzinfo=timezone.utc)


def test_sessions_intersecting_range(db, instructor):
    repository = RepositoryFactory.create_course_repository(db)
    course = Course(instructor_id=instructor.id, title="Group Theory")
    retired = Course(instructor_id=instructor.id, title="Old Course", is_active=False)
    db.add_all([course, retired])
    db.flush()
    repository.add_session(course.id, _utc(18), _utc(19))
    repository.add_session(course.id, _utc(20), _utc(21))
    repository.add_session(retired.id, _utc(18), _utc(19))
    db.commit()

    sessions = repository.get_sessions_for_instructor_in_range(instructor.id, _utc(17), _utc(19))

    assert [(s.start_time, s.course.title) for s in sessions] == [(_utc(18), "Group Theory")]
    assert repository.get_sessions_for_instructor_in_range(instructor.id, _utc(19), _utc(20)) == []


def test_active_types_in_display_order(db, instructor):
    def _type(title, sort_order, is_active=True):
        return AppointmentType(
            instructor_id=instructor.id,
            title=title,
            is_variable_duration=False,
            duration_minutes=30,
            price=Decimal("10"),
            sort_order=sort_order,
            is_active=is_active,
        )

    db.add_all([_type("Zeta", 0), _type("Alpha", 0), _type("First", -1), _type("Hidden", 0, False)])
    db.commit()

    repository = RepositoryFactory.create_appointment_type_repository(db)
    titles = [t.title for t in repository.list_active_for_instructor(instructor.id)]
    assert titles == ["First", "Alpha", "Zeta"]
