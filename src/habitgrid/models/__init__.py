"""SQLModel table exports."""

from .habit import Habit, HabitLog

__all__ = [
    "Habit",
    "HabitLog",
]
