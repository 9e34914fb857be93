"""Date grid generation and grid assembly shared by every view.

The desktop page, the mobile page and the server-rendered initial state all
build their rows through :func:`build_grid`, so a cell's completion state and a
row's streak are computed the same way everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..models.habit import Habit, HabitLog
from .habits import as_date, completed_days, current_streak

EMPTY_STATE_TITLE = "No habits yet"
EMPTY_STATE_MESSAGE = 'Click "+ Add" to create your first habit'

_FULL_DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_COMPACT_DAY_NAMES = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")


class GridLayout(str, Enum):
    """Supported grid layouts."""

    COMPACT = "compact"
    FULL = "full"

    @property
    def window(self) -> int:
        """Number of date columns shown."""
        return 3 if self is GridLayout.COMPACT else 7

    @property
    def show_streak(self) -> bool:
        return self is GridLayout.FULL

    def header_label(self, day: date) -> str:
        """Column header text, e.g. ``"Mon\\n3/5"`` or ``"Mo\\n5"``."""
        if self is GridLayout.COMPACT:
            return f"{_COMPACT_DAY_NAMES[day.weekday()]}\n{day.day}"
        return f"{_FULL_DAY_NAMES[day.weekday()]}\n{day.month}/{day.day}"


def grid_dates(window: int, today: date | None = None) -> list[date]:
    """Return ``window`` consecutive dates, oldest first, ending with today."""

    if window < 1:
        raise ValueError("window must be at least 1")
    anchor = today or date.today()
    return [anchor - timedelta(days=offset) for offset in range(window - 1, -1, -1)]


@dataclass
class HabitWithLogs:
    """A habit paired with its recent log rows."""

    habit: Habit
    logs: list[HabitLog] = field(default_factory=list)

    @property
    def id(self) -> Optional[int]:
        return self.habit.id

    def to_dict(self) -> dict[str, Any]:
        payload = self.habit.to_dict()
        payload["logs"] = [log.to_dict() for log in self.logs]
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HabitWithLogs":
        """Rebuild a snapshot from its :meth:`to_dict` form."""

        created_raw = data.get("created_at")
        habit = Habit(
            id=data.get("id"),
            name=data.get("name", ""),
            description=data.get("description") or "",
            order_position=data.get("order_position"),
        )
        if created_raw:
            habit.created_at = datetime.fromisoformat(created_raw)
        logs = [
            HabitLog(
                id=log.get("id"),
                habit_id=log.get("habit_id", habit.id),
                date=as_date(log["date"]),
                completed=bool(log.get("completed")),
                notes=log.get("notes"),
            )
            for log in data.get("logs", ())
        ]
        return cls(habit=habit, logs=logs)


@dataclass(frozen=True)
class GridColumn:
    day: date
    label: str
    is_today: bool

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.day.isoformat(), "label": self.label, "is_today": self.is_today}


@dataclass(frozen=True)
class GridCell:
    day: date
    completed: bool
    is_today: bool

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.day.isoformat(), "completed": self.completed, "is_today": self.is_today}


@dataclass(frozen=True)
class GridRow:
    habit_id: Optional[int]
    name: str
    description: str
    cells: tuple[GridCell, ...]
    streak: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "habit_id": self.habit_id,
            "name": self.name,
            "description": self.description,
            "cells": [cell.to_dict() for cell in self.cells],
            "streak": self.streak,
        }


@dataclass(frozen=True)
class Grid:
    """Display structure: one row per habit, one column per date."""

    layout: GridLayout
    today: date
    columns: tuple[GridColumn, ...]
    rows: tuple[GridRow, ...]

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def show_streak(self) -> bool:
        return self.layout.show_streak

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "layout": self.layout.value,
            "today": self.today.isoformat(),
            "show_streak": self.show_streak,
            "columns": [column.to_dict() for column in self.columns],
            "rows": [row.to_dict() for row in self.rows],
            "empty": self.is_empty,
        }
        if self.is_empty:
            payload["empty_state"] = {"title": EMPTY_STATE_TITLE, "message": EMPTY_STATE_MESSAGE}
        return payload


def build_grid(
    habits: Sequence[HabitWithLogs] | Iterable[HabitWithLogs],
    layout: GridLayout,
    *,
    today: date | None = None,
) -> Grid:
    """Assemble the grid for ``habits`` in the given layout."""

    anchor = today or date.today()
    dates = grid_dates(layout.window, anchor)
    last_index = len(dates) - 1
    columns = tuple(
        GridColumn(day=day, label=layout.header_label(day), is_today=index == last_index)
        for index, day in enumerate(dates)
    )

    rows: list[GridRow] = []
    for item in habits:
        done = completed_days(item.logs)
        cells = tuple(
            GridCell(day=day, completed=day in done, is_today=index == last_index)
            for index, day in enumerate(dates)
        )
        streak = current_streak(item.logs, today=anchor) if layout.show_streak else None
        rows.append(
            GridRow(
                habit_id=item.habit.id,
                name=item.habit.name,
                description=item.habit.description or "",
                cells=cells,
                streak=streak,
            )
        )

    return Grid(layout=layout, today=anchor, columns=columns, rows=tuple(rows))


__all__ = [
    "EMPTY_STATE_MESSAGE",
    "EMPTY_STATE_TITLE",
    "Grid",
    "GridCell",
    "GridColumn",
    "GridLayout",
    "GridRow",
    "HabitWithLogs",
    "build_grid",
    "grid_dates",
]
