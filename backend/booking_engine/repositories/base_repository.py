# backend/booking_engine/repositories/base_repository.py
"""
Base repository for the booking engine.

Repositories flush but never commit; BookingService and the other services
own the transaction boundary. Store failures surface as RepositoryException
so services do not depend on SQLAlchemy error types.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..database import get_dialect_name

ModelT = TypeVar("ModelT")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelT]):
    """
    Lookup and insert for one ORM model.

    Attributes:
        db: SQLAlchemy session shared with the calling service
        model: Mapped class this repository serves
    """

    def __init__(self, db: Session, model: Type[ModelT]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        return get_dialect_name(self.db)

    @contextmanager
    def _store_errors(self, action: str) -> Iterator[None]:
        """Log and wrap any SQLAlchemy failure raised while performing action."""
        try:
            yield
        except SQLAlchemyError as exc:
            self.logger.error(f"Failed to {action} {self.model.__name__}: {str(exc)}")
            raise RepositoryException(f"Failed to {action} {self.model.__name__}: {str(exc)}")

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[ModelT]:
        """
        Row with the given primary key, or None.

        Args:
            id: ULID primary key
            load_relationships: Apply the subclass's eager loading
        """
        with self._store_errors("retrieve"):
            query = self.db.query(self.model).filter(self.model.id == id)
            if load_relationships:
                query = self._apply_eager_loading(query)
            return query.first()

    def create(self, **kwargs: Any) -> ModelT:
        """
        Insert a row and flush so its id and defaults are populated.

        Raises:
            RepositoryException: On a constraint violation or store failure
        """
        entity = self.model(**kwargs)
        try:
            self.db.add(entity)
            self.db.flush()
        except IntegrityError as exc:
            self.logger.error(
                "Integrity error creating %s: %s", self.model.__name__, exc, exc_info=True
            )
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")
        return entity

    def flush(self) -> None:
        """Flush pending ORM changes."""
        with self._store_errors("flush"):
            self.db.flush()

    def _apply_eager_loading(self, query: Query) -> Query:
        """Subclasses add joinedload options for their relationships."""
        return query
