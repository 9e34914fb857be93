"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, col, select

from ...models.habit import Habit, HabitLog

RECENT_LOG_LIMIT = 90


class SQLModelHabitRepository:
    """SQLModel-based habit repository bound to one tenant database."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def list_habits(self) -> list[Habit]:
        """List habits by position, newest first among equal positions."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(
                col(Habit.order_position).asc(),
                col(Habit.created_at).desc(),
                col(Habit.id).desc(),
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def recent_logs(self, habit_id: int, limit: int = RECENT_LOG_LIMIT) -> list[HabitLog]:
        """Most recent logs for a habit, newest date first."""
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .order_by(col(HabitLog.date).desc())
                .limit(limit)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create_habit(self, name: str, description: str) -> Habit:
        """Append a new habit at max(order_position) + 1."""
        with self.session_factory() as session:
            max_position = session.exec(select(func.max(Habit.order_position))).one()
            habit = Habit(
                name=name,
                description=description,
                order_position=0 if max_position is None else max_position + 1,
            )
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update_habit(self, habit_id: int, name: str, description: str) -> bool:
        """Overwrite name and description."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return False
            habit.name = name
            habit.description = description
            session.add(habit)
            session.commit()
            return True

    def delete_habit(self, habit_id: int) -> bool:
        """Delete a habit together with all of its logs."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return False
            logs = session.exec(select(HabitLog).where(HabitLog.habit_id == habit_id)).all()
            for log in logs:
                session.delete(log)
            session.delete(habit)
            session.commit()
            return True

    def set_order_position(self, habit_id: int, order_position: int) -> bool:
        """Persist one habit's position."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return False
            habit.order_position = order_position
            session.add(habit)
            session.commit()
            return True

    def toggle_log(self, habit_id: int, day: date) -> bool:
        """Flip the existing row for (habit, day) or insert it as completed."""
        with self.session_factory() as session:
            existing = session.exec(
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .where(HabitLog.date == day)
            ).first()

            if existing:
                existing.completed = not existing.completed
                session.add(existing)
                session.commit()
                return existing.completed

            session.add(HabitLog(habit_id=habit_id, date=day, completed=True))
            session.commit()
            return True

    def update_log_notes(self, log_id: int, notes: str) -> bool:
        """Set notes on a log row."""
        with self.session_factory() as session:
            log = session.get(HabitLog, log_id)
            if log is None:
                return False
            log.notes = notes
            session.add(log)
            session.commit()
            return True

    def count_logs(self, habit_id: int) -> int:
        """Number of log rows stored for a habit."""
        with self.session_factory() as session:
            statement = select(func.count()).select_from(HabitLog).where(HabitLog.habit_id == habit_id)
            return int(session.exec(statement).one())

    def logs_between(self, start: date, end: date) -> list[tuple[HabitLog, str]]:
        """Logs dated within [start, end] with their habit name."""
        with self.session_factory() as session:
            statement = (
                select(HabitLog, Habit.name)
                .join(Habit, col(HabitLog.habit_id) == col(Habit.id))
                .where(HabitLog.date >= start)
                .where(HabitLog.date <= end)
                .order_by(col(HabitLog.date).desc(), col(Habit.name).asc())
            )
            rows = [(log, name) for log, name in session.exec(statement).all()]
            session.expunge_all()
            return rows


__all__ = ["RECENT_LOG_LIMIT", "SQLModelHabitRepository"]
