"""Database infrastructure for per-tenant SQLite files."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping

from sqlalchemy import event, inspect, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger(__name__)

# Columns introduced after the first schema version: (table, column, DDL type).
LATER_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("habits", "order_position", "INTEGER"),
)


def _install_pragmas(engine: Engine, pragmas: Mapping[str, str]) -> None:
    """Apply SQLite PRAGMAs on every new DBAPI connection."""

    @event.listens_for(engine, "connect")
    def _apply(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        try:
            for key, value in pragmas.items():
                cursor.execute(f"PRAGMA {key}={value}")
        finally:
            cursor.close()


def create_db_engine(db_path: Path, config: BaseConfig) -> Engine:
    """Create a SQLModel engine bound to one tenant's database file."""

    engine = create_engine(f"sqlite:///{db_path}", **config.sqlalchemy_engine_options())
    _install_pragmas(engine, config.SQLITE_PRAGMAS)
    return engine


def _convert_epoch_timestamps(connection) -> int:
    """Rewrite ``habits.created_at`` values stored as epoch milliseconds.

    Older files keep ``created_at`` as an INTEGER; the table model reads it as
    a ``YYYY-MM-DD HH:MM:SS.fff`` UTC string.
    """

    result = connection.execute(
        text(
            "UPDATE habits "
            "SET created_at = strftime('%Y-%m-%d %H:%M:%f', created_at / 1000.0, 'unixepoch') "
            "WHERE typeof(created_at) IN ('integer', 'real')"
        )
    )
    return result.rowcount or 0


def migrate_schema(engine: Engine) -> list[str]:
    """Bring older database files up to the current table layout.

    Adds missing columns and converts epoch-millisecond ``created_at`` values.
    Returns the ``table.column`` names that were changed.
    """

    inspector = inspect(engine)
    applied: list[str] = []
    with engine.begin() as connection:
        for table, column, ddl_type in LATER_COLUMNS:
            existing = {col["name"] for col in inspector.get_columns(table)}
            if column in existing:
                continue
            connection.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))
            applied.append(f"{table}.{column}")

        if "habits.order_position" in applied:
            # Seed the new ordering from creation order.
            rows = connection.execute(
                text("SELECT id FROM habits ORDER BY created_at ASC, id ASC")
            ).all()
            for index, (habit_id,) in enumerate(rows):
                connection.execute(
                    text("UPDATE habits SET order_position = :position WHERE id = :id"),
                    {"position": index, "id": habit_id},
                )

        # After the backfill, which orders by the raw values.
        converted = _convert_epoch_timestamps(connection)
        if converted:
            applied.append("habits.created_at")

    for name in applied:
        logger.info(f"Migrated column {name}", extra={"database": str(engine.url)})
    return applied


def init_database(engine: Engine) -> list[str]:
    """Create missing tables, then apply column migrations."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    return migrate_schema(engine)


def create_session_factory(engine: Engine):
    """Create a session factory function."""

    @contextmanager
    def factory() -> Iterator[Session]:
        """Create a new session committed on success, rolled back on error."""
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory
