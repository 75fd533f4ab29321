# app/core/logging_config.py
"""
Logging setup for the migrator.

App loggers (app.*) follow LOG_LEVEL; HTTP client and database driver loggers
are held at WARNING so per-product migration logs stay readable.
"""

import logging
from typing import Optional

from app.core.config import get_settings

NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "sqlalchemy",
    "sqlalchemy.engine",
    "asyncpg",
    "aiosqlite",
    "alembic",
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None) -> int:
    """
    Configure the root logger and return the numeric level applied to app loggers.

    `level` overrides settings.LOG_LEVEL; unknown names fall back to INFO.
    """
    level_name = (level or get_settings().LOG_LEVEL or "INFO").upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("app").setLevel(numeric_level)
    logging.getLogger("__main__").setLevel(numeric_level)

    logging.getLogger(__name__).info(f"Logging configured at level: {logging.getLevelName(numeric_level)}")
    return numeric_level
