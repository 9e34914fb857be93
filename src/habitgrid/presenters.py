"""Thin view adapters over the shared grid assembly."""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from .services.grid import Grid, GridLayout, HabitWithLogs, build_grid


def desktop_grid(habits: Sequence[HabitWithLogs], *, today: date | None = None) -> Grid:
    """Seven-day grid with a trailing streak column."""

    return build_grid(habits, GridLayout.FULL, today=today)


def mobile_grid(habits: Sequence[HabitWithLogs], *, today: date | None = None) -> Grid:
    """Three-day grid without the streak column."""

    return build_grid(habits, GridLayout.COMPACT, today=today)


def layout_grid(
    habits: Sequence[HabitWithLogs], layout: GridLayout, *, today: date | None = None
) -> Grid:
    if layout is GridLayout.COMPACT:
        return mobile_grid(habits, today=today)
    return desktop_grid(habits, today=today)


def ssr_state(
    habits: Sequence[HabitWithLogs], *, today: date | None = None
) -> tuple[Grid, dict[str, Any]]:
    """Desktop grid plus the initial state embedded for client hydration.

    Rebuilding the grid from ``state["habits"]`` yields the same grid, so the
    client can skip its first fetch.
    """

    grid = desktop_grid(habits, today=today)
    state = {"habits": [item.to_dict() for item in habits], "rendered": True}
    return grid, state


def hydrate(state: dict[str, Any]) -> list[HabitWithLogs]:
    """Rebuild habit snapshots from an embedded initial state."""

    return [HabitWithLogs.from_dict(item) for item in state.get("habits", ())]


__all__ = ["desktop_grid", "hydrate", "layout_grid", "mobile_grid", "ssr_state"]
