"""Tests for tenant name validation, the tenant cache and schema migration."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime

import pytest

from habitgrid.errors import ValidationError
from habitgrid.tenants import TenantRegistry, sanitize_tenant


class TestSanitizeTenant:
    @pytest.mark.parametrize("name", ["alice", "tenant-1_ok", "ABC", "0"])
    def test_accepts_safe_names(self, name):
        assert sanitize_tenant(name) == name

    @pytest.mark.parametrize("name", ["tenant one", "../etc", "a/b", "bob.db", "é"])
    def test_rejects_unsafe_names(self, name):
        with pytest.raises(ValidationError) as excinfo:
            sanitize_tenant(name)
        assert "letters, numbers, hyphens, and underscores" in excinfo.value.message

    @pytest.mark.parametrize("name", ["", None])
    def test_rejects_empty_names(self, name):
        with pytest.raises(ValidationError) as excinfo:
            sanitize_tenant(name)
        assert excinfo.value.message == "Invalid tenant name"


class TestTenantRegistry:
    def test_first_use_creates_database_file(self, registry, config):
        handle = registry.resolve("fresh")

        assert handle.path == config.DATABASES_DIR / "fresh.db"
        assert handle.path.exists()
        assert handle.migrations == []

    def test_resolve_reuses_open_handle(self, registry):
        assert registry.resolve("alice") is registry.resolve("alice")
        assert len(registry) == 1

    def test_tenants_are_isolated(self, registry):
        alice = registry.store_for("alice")
        bob = registry.store_for("bob")
        alice.create_habit("Alice habit", "")

        assert [habit.name for habit in alice.list_habits()] == ["Alice habit"]
        assert bob.list_habits() == []

    def test_least_recently_used_tenant_is_evicted(self, config):
        registry = TenantRegistry(config, capacity=2)
        try:
            registry.resolve("a")
            registry.resolve("b")
            registry.resolve("a")
            registry.resolve("c")

            assert registry.open_tenants() == ["a", "c"]
            assert "b" not in registry
        finally:
            registry.close()

    def test_eviction_is_logged_with_open_tenants(self, config, caplog):
        """The eviction log names the tenant and what is still open."""
        registry = TenantRegistry(config, capacity=1)
        try:
            with caplog.at_level(logging.INFO, logger="habitgrid.tenants"):
                registry.resolve("a")
                registry.resolve("b")

            evictions = [r for r in caplog.records if r.getMessage() == "Evicted tenant database a"]
            assert len(evictions) == 1
            assert evictions[0].open_tenants == ["b"]
        finally:
            registry.close()

    def test_evicted_tenant_reopens_with_data_and_same_lock(self, config):
        registry = TenantRegistry(config, capacity=1)
        try:
            store = registry.store_for("a")
            store.create_habit("Persisted", "")
            lock = registry.resolve("a").lock

            registry.resolve("b")
            assert "a" not in registry

            reopened = registry.store_for("a")
            assert [habit.name for habit in reopened.list_habits()] == ["Persisted"]
            assert reopened.handle.lock is lock
            assert registry.lock_for("a") is lock
        finally:
            registry.close()

    def test_capacity_defaults_to_config(self, config, monkeypatch):
        monkeypatch.setattr(config, "TENANT_CACHE_SIZE", 3)
        assert TenantRegistry(config).capacity == 3

    def test_invalid_tenant_never_touches_disk(self, registry, config):
        with pytest.raises(ValidationError):
            registry.resolve("../escape")
        assert list(config.DATABASES_DIR.iterdir()) == []


# 2024-03-01 08:00:00 UTC in epoch milliseconds.
MARCH_1_MS = 1709280000000
DAY_MS = 86_400_000

HABITS_DDL = """
CREATE TABLE habits (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    created_at INTEGER NOT NULL{order_column}
);
CREATE TABLE habit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    habit_id INTEGER NOT NULL,
    date TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0,
    notes TEXT,
    FOREIGN KEY (habit_id) REFERENCES habits(id) ON DELETE CASCADE,
    UNIQUE(habit_id, date)
);
"""


def write_epoch_layout_database(path, *, with_order_column: bool) -> None:
    """Write a tenant file with INTEGER epoch-millisecond `created_at` values."""

    order_column = ",\n    order_position INTEGER" if with_order_column else ""
    connection = sqlite3.connect(path)
    try:
        connection.executescript(HABITS_DDL.format(order_column=order_column))
        rows = [
            (1, "Newest", "", MARCH_1_MS + 2 * DAY_MS),
            (2, "Oldest", "", MARCH_1_MS),
            (3, "Middle", "", MARCH_1_MS + DAY_MS),
        ]
        connection.executemany(
            "INSERT INTO habits (id, name, description, created_at) VALUES (?, ?, ?, ?)", rows
        )
        if with_order_column:
            connection.executemany(
                "UPDATE habits SET order_position = ? WHERE id = ?", [(0, 1), (1, 3), (2, 2)]
            )
        connection.execute(
            "INSERT INTO habit_logs (habit_id, date, completed, notes) VALUES (2, '2024-03-01', 1, 'first')"
        )
        connection.commit()
    finally:
        connection.close()


class TestSchemaMigration:
    """Opening tenant files written before the current layout."""

    def test_missing_order_column_is_added_and_backfilled(self, registry, config):
        """Ordering is seeded from creation order, oldest first."""
        write_epoch_layout_database(config.tenant_database_path("legacy"), with_order_column=False)

        handle = registry.resolve("legacy")
        store = registry.store_for("legacy")

        assert handle.migrations == ["habits.order_position", "habits.created_at"]
        positions = {habit.name: habit.order_position for habit in store.list_habits()}
        assert positions == {"Oldest": 0, "Middle": 1, "Newest": 2}
        assert [habit.name for habit in store.list_habits()] == ["Oldest", "Middle", "Newest"]
        assert store.repo.count_logs(2) == 1

    def test_epoch_timestamps_are_readable(self, registry, config):
        """Millisecond timestamps load as datetimes, and logs keep their values."""
        write_epoch_layout_database(config.tenant_database_path("legacy"), with_order_column=True)

        handle = registry.resolve("legacy")
        store = registry.store_for("legacy")

        assert handle.migrations == ["habits.created_at"]
        assert [habit.name for habit in store.list_habits()] == ["Newest", "Middle", "Oldest"]
        oldest = store.get_habit(2)
        assert oldest.habit.created_at.replace(tzinfo=None) == datetime(2024, 3, 1, 8, 0)
        assert oldest.logs[0].date == date(2024, 3, 1)
        assert oldest.logs[0].completed is True
        assert oldest.logs[0].notes == "first"

    def test_migrated_tenant_serves_api_and_page(self, app, client, config):
        """Both the JSON list and the rendered page work on a migrated file."""
        write_epoch_layout_database(config.tenant_database_path("legacy"), with_order_column=False)

        response = client.get("/api/habits?tenant=legacy")
        assert response.status_code == 200
        assert [habit["name"] for habit in response.get_json()] == ["Oldest", "Middle", "Newest"]

        page = client.get("/?tenant=legacy").get_data(as_text=True)
        assert page.count('class="habit-row"') == 3

    def test_new_habit_after_migration_goes_last(self, registry, config):
        """New habits append after the backfilled positions."""
        write_epoch_layout_database(config.tenant_database_path("legacy"), with_order_column=False)
        store = registry.store_for("legacy")

        assert store.create_habit("Added", "").order_position == 3

    def test_migration_runs_once(self, config):
        """A second open finds nothing left to migrate."""
        write_epoch_layout_database(config.tenant_database_path("legacy"), with_order_column=False)

        first = TenantRegistry(config, capacity=1)
        assert first.resolve("legacy").migrations == ["habits.order_position", "habits.created_at"]
        first.close()

        second = TenantRegistry(config, capacity=1)
        try:
            assert second.resolve("legacy").migrations == []
        finally:
            second.close()
