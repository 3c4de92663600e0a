# app/core/logging.py
import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S%z"

_QUIET = ("apscheduler", "sqlalchemy.engine", "alembic.runtime.migration", "httpx")


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        level=(level or settings.LOG_LEVEL).upper(),
    )
    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)
