"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import Habit, HabitLog


class HabitRepository(Protocol):
    """Persistence contract for one tenant's habits and logs."""

    def list_habits(self) -> list[Habit]:
        """List habits in display order."""
        ...

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def recent_logs(self, habit_id: int, limit: int = ...) -> list[HabitLog]:
        """Most recent logs for a habit, newest date first."""
        ...

    def create_habit(self, name: str, description: str) -> Habit:
        """Append a new habit at the end of the ordering."""
        ...

    def update_habit(self, habit_id: int, name: str, description: str) -> bool:
        """Overwrite name/description; False when the habit is absent."""
        ...

    def delete_habit(self, habit_id: int) -> bool:
        """Delete a habit and its logs; False when absent."""
        ...

    def set_order_position(self, habit_id: int, order_position: int) -> bool:
        """Persist one habit's position."""
        ...

    def toggle_log(self, habit_id: int, day: date) -> bool:
        """Flip or create the log for (habit, day); return the new state."""
        ...

    def count_logs(self, habit_id: int) -> int:
        ...

    def update_log_notes(self, log_id: int, notes: str) -> bool:
        """Set notes on a log; False when absent."""
        ...

    def logs_between(self, start: date, end: date) -> list[tuple[HabitLog, str]]:
        """Logs in the inclusive range paired with their habit name."""
        ...
