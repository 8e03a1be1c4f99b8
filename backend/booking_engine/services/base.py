# backend/booking_engine/services/base.py
"""
Base service for the booking engine.

Every service shares the caller's Session and gets:
- transaction(): commit on success, rollback on any error
- measure_operation: per-call timing into in-process stats and Prometheus
- log_operation: one structured INFO line per completed command
"""

from contextlib import contextmanager
from dataclasses import asdict, dataclass
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class OperationStats:
    """Running totals for one service operation."""

    count: int = 0
    success_count: int = 0
    failure_count: int = 0
    total_time: float = 0.0
    min_time: float = float("inf")
    max_time: float = 0.0

    def add(self, elapsed: float, success: bool) -> None:
        self.count += 1
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)
        if success:
            self.success_count += 1
        else:
            self.failure_count += 1

    def summary(self) -> Dict[str, Any]:
        return {
            **asdict(self),
            "avg_time": self.total_time / self.count if self.count else 0.0,
            "success_rate": self.success_count / self.count if self.count else 0.0,
        }


class BaseService:
    """Base class for the booking engine services."""

    # service class name -> operation -> stats
    _operation_stats: Dict[str, Dict[str, OperationStats]] = {}

    def __init__(self, db: Session):
        """
        Initialize base service.

        Args:
            db: Database session
        """
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Run a unit of work and commit it.

        Domain exceptions raised inside the block roll back and propagate
        unchanged; bare SQLAlchemy errors surface as ServiceException.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}")
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator timing a service method.

        Usage:
            @BaseService.measure_operation("book")
            def book(self, ...):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    self._finish_operation(
                        operation_name, time.perf_counter() - started, error_type
                    )

            return cast(F, wrapper)

        return decorator

    def _finish_operation(
        self, operation: str, elapsed: float, error_type: Optional[str]
    ) -> None:
        success = error_type is None
        stats = BaseService._operation_stats.setdefault(self.__class__.__name__, {})
        stats.setdefault(operation, OperationStats()).add(elapsed, success)

        if elapsed > settings.slow_operation_seconds:
            self.logger.warning(f"Slow operation detected: {operation} took {elapsed:.2f}s")

        if not settings.metrics_enabled:
            return
        try:
            prometheus_metrics.record_service_operation(
                service=self.__class__.__name__,
                operation=operation,
                duration=elapsed,
                status="success" if success else "error",
                error_type=error_type,
            )
        except Exception as metrics_error:
            logger.debug(f"Metrics recording failed: {metrics_error}")

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log a completed command with its context as structured extras.

        Args:
            operation: Operation name
            **context: Ids and statuses to attach to the record
        """
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """In-process stats recorded for this service class, keyed by operation."""
        stats = BaseService._operation_stats.get(self.__class__.__name__, {})
        return {operation: data.summary() for operation, data in stats.items()}
