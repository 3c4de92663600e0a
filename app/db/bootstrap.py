# app/db/bootstrap.py
import logging
import os

from alembic import command
from alembic.config import Config

from app.db.session import SQLALCHEMY_DATABASE_URL

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

logger = logging.getLogger(__name__)


def alembic_config(database_url: str = SQLALCHEMY_DATABASE_URL) -> Config:
    # Points explicitly at alembic.ini and migrations/
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def run_migrations(database_url: str = SQLALCHEMY_DATABASE_URL) -> None:
    logger.info("Applying migrations up to head")
    command.upgrade(alembic_config(database_url), "head")
