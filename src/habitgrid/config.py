"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitGrid"
    DATABASES_DIRNAME = "databases"
    LOGS_DIRNAME = "logs"
    DB_SUFFIX = ".db"
    SQLITE_PRAGMAS = {"foreign_keys": "on"}
    TESTING = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("HABITGRID_SECRET_KEY", "replace-me")
        self.DEV_MODE = _env_bool("HABITGRID_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.HOST = os.getenv("HABITGRID_HOST", "0.0.0.0")
        self.PORT = _env_int("PORT", 3001)
        self.TENANT_CACHE_SIZE = max(1, _env_int("HABITGRID_TENANT_CACHE_SIZE", 64))
        self.LOG_LEVEL = os.getenv("HABITGRID_LOG_LEVEL", "INFO").upper()
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("HABITGRID_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where tenant databases and logs live."""

        data_root = os.getenv("HABITGRID_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def DATABASES_DIR(self) -> Path:
        """Directory holding one SQLite file per tenant."""

        path = Path(self.DATA_DIR) / self.DATABASES_DIRNAME
        path.mkdir(parents=True, exist_ok=True)
        return path

    def tenant_database_path(self, tenant: str) -> Path:
        """Return the database file for an already-sanitized tenant."""

        return self.DATABASES_DIR / f"{tenant}{self.DB_SUFFIX}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite files."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test-suite."""

    DEBUG = False
    TESTING = True
