# backend/booking_engine/models/course.py
"""
Group course models.

Courses are owned by an instructor and meet in scheduled sessions. The
booking engine only reads session intervals as conflicts.
"""

import logging

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class Course(Base):
    """Group course owned by an instructor."""

    __tablename__ = "courses"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    instructor = relationship("User", backref="courses")
    schedules = relationship(
        "CourseSchedule",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseSchedule.start_time",
    )

    def __repr__(self) -> str:
        return f"<Course {self.title}>"


class CourseSchedule(Base):
    """One meeting of a course."""

    __tablename__ = "course_schedules"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    course_id = Column(String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)

    course = relationship("Course", back_populates="schedules")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_course_schedules_time_order"),
        Index("idx_course_schedules_course_start", "course_id", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<CourseSchedule {self.start_time}-{self.end_time}>"
