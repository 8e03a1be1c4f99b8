# backend/booking_engine/repositories/user_repository.py
"""User repository: instructor and student lookups for the booking engine."""

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)
