"""
Process-wide logging bootstrap.

The library itself only creates module loggers. The hosting process (the
HTTP app factory or a worker entry point) calls setup_logging() once at
startup, before the first service is built.
"""

import logging

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger once for the process.

    Args:
        level: Level name overriding settings.log_level
    """
    resolved = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)

    # Quiet noisy third-party loggers unless debugging
    if resolved != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
