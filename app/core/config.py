# app/core/config.py
import os
from typing import ClassVar

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _default_database_url() -> str:
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'events.db')}")


class Settings(BaseModel):
    # Not a pydantic field
    DATA_DIR: ClassVar[str] = os.path.abspath(os.getenv("DATA_DIR", "./data"))

    DATABASE_URL: str = Field(default_factory=_default_database_url)
    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    SCHEDULER_ENABLED: bool = Field(default_factory=lambda: _env_bool("SCHEDULER_ENABLED", "true"))
    TRANSITION_INTERVAL_SECONDS: int = Field(default_factory=lambda: int(os.getenv("TRANSITION_INTERVAL_SECONDS", "60")))
    # Must cover a full-event bulk conversion, not just a single admission
    TRANSACTION_TIMEOUT_SECONDS: int = Field(default_factory=lambda: int(os.getenv("TRANSACTION_TIMEOUT_SECONDS", "30")))
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default_factory=lambda: _env_bool("RUN_MIGRATIONS_ON_STARTUP", "true"))
    DEFAULT_PAGE_SIZE: int = Field(default_factory=lambda: int(os.getenv("DEFAULT_PAGE_SIZE", "15")))
    MAX_PAGE_SIZE: int = Field(default_factory=lambda: int(os.getenv("MAX_PAGE_SIZE", "100")))


settings = Settings()
