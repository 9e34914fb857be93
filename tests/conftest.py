"""Pytest configuration and shared fixtures for HabitGrid tests.

Every test gets its own data directory so tenant databases and log files never
leak between tests or into the working tree.
"""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import Iterable

import pytest

from habitgrid import create_app
from habitgrid.config import TestConfig
from habitgrid.models import HabitLog
from habitgrid.tenants import TenantRegistry


@pytest.fixture(autouse=True)
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HABITGRID_DATA_DIR at a per-test temporary directory."""

    monkeypatch.setenv("HABITGRID_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HABITGRID_DEV_MODE", "true")
    monkeypatch.delenv("HABITGRID_TENANT_CACHE_SIZE", raising=False)
    return tmp_path


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(data_dir):
    """Flask app configured for tests."""

    application = create_app("testing")
    yield application
    application.extensions["habitgrid.tenants"].close()


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def config(data_dir) -> TestConfig:
    return TestConfig()


@pytest.fixture
def registry(config):
    """Tenant registry outside of any Flask app."""

    reg = TenantRegistry(config, capacity=4)
    yield reg
    reg.close()


@pytest.fixture
def store(registry):
    """Store for a fresh tenant named ``tester``."""

    return registry.store_for("tester")


@pytest.fixture
def habit_factory(store):
    """Factory for creating habits through the store."""

    def _create_habit(name: str = "Test Habit", description: str = "Test habit description"):
        return store.create_habit(name, description)

    return _create_habit


# =============================================================================
# Helpers
# =============================================================================


def _make_logs(
    habit_id: int,
    days_ago: Iterable[int],
    *,
    today: date,
    completed: bool = True,
) -> list[HabitLog]:
    """Build unsaved HabitLog rows ``days_ago`` days before ``today``."""

    return [
        HabitLog(habit_id=habit_id, date=today - timedelta(days=offset), completed=completed)
        for offset in days_ago
    ]


@pytest.fixture
def make_logs():
    """Return the unsaved-log builder used by the pure computation tests."""

    return _make_logs


@pytest.fixture
def today() -> date:
    """A fixed anchor date for computations that accept ``today``."""

    return date(2024, 3, 15)
