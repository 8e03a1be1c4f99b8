# backend/booking_engine/repositories/course_repository.py
"""Course repository: group-course sessions read as booking conflicts."""

from datetime import datetime
import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.course import Course, CourseSchedule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CourseRepository(BaseRepository[Course]):
    def __init__(self, db: Session):
        super().__init__(db, Course)

    def get_sessions_for_instructor_in_range(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> List[CourseSchedule]:
        """Sessions of the instructor's courses intersecting [start, end)."""
        try:
            return (
                self.db.query(CourseSchedule)
                .join(Course, CourseSchedule.course_id == Course.id)
                .options(joinedload(CourseSchedule.course))
                .filter(
                    Course.instructor_id == instructor_id,
                    Course.is_active.is_(True),
                    CourseSchedule.start_time < end,
                    CourseSchedule.end_time > start,
                )
                .order_by(CourseSchedule.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting course sessions: {str(e)}")
            raise RepositoryException(f"Failed to get course sessions: {str(e)}")

    def add_session(self, course_id: str, start: datetime, end: datetime) -> CourseSchedule:
        try:
            session = CourseSchedule(course_id=course_id, start_time=start, end_time=end)
            self.db.add(session)
            self.db.flush()
            return session
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding course session: {str(e)}")
            raise RepositoryException(f"Failed to add course session: {str(e)}")
