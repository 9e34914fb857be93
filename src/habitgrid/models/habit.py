"""Habit tracking tables stored in each tenant database."""

from __future__ import annotations

import datetime as dt
from typing import Any, ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Habit(SQLModel, table=True):
    """A habit the tenant checks off daily."""

    __tablename__: ClassVar[str] = "habits"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    description: Optional[str] = Field(default="")
    created_at: dt.datetime = Field(default_factory=_utcnow, nullable=False)
    order_position: Optional[int] = Field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "order_position": self.order_position,
        }


class HabitLog(SQLModel, table=True):
    """Completion state of one habit on one calendar day."""

    __tablename__: ClassVar[str] = "habit_logs"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_logs_habit_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habits.id", ondelete="CASCADE", nullable=False, index=True)
    date: dt.date = Field(nullable=False, index=True)
    completed: bool = Field(default=False, nullable=False)
    notes: Optional[str] = Field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "date": self.date.isoformat() if isinstance(self.date, dt.date) else self.date,
            "completed": bool(self.completed),
            "notes": self.notes,
        }
