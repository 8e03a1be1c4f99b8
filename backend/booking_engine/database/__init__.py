"""
Database engine, session factory, and declarative base for the booking engine.

Services never open sessions themselves; callers pass one in, usually from
get_db(), and the service decides when to commit.
"""

from __future__ import annotations

import logging
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)

# PostgreSQL pool tuning; SQLite uses SQLAlchemy's defaults
_POSTGRES_POOL_KWARGS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 5,
    "pool_timeout": 5,
    "pool_recycle": 300,
    "pool_pre_ping": True,
}


def build_engine(config: Settings) -> Engine:
    """Engine for the configured URL with dialect-appropriate pooling."""
    kwargs: dict[str, Any] = {"echo": config.database_echo}
    if config.is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(_POSTGRES_POOL_KWARGS)
    return create_engine(config.database_url, **kwargs)


engine: Engine = build_engine(settings)

SessionLocal = sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield a session; commit when the caller finishes cleanly, else roll back."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """Dialect name of the engine a session is bound to."""
    try:
        bind = session.get_bind()
    except Exception:
        logger.debug("Session has no bind; assuming %s", default)
        return default
    dialect = getattr(bind, "dialect", None)
    return getattr(dialect, "name", default) or default
