"""Tenant-scoped habit store: CRUD, toggling and reordering."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import HabitGridError, NotFound, StorageFailure, ValidationError
from ..forms import (
    HabitForm,
    LogNotesForm,
    LogRangeQuery,
    ReorderEntry,
    ToggleForm,
    validate_payload,
)
from ..logging_config import get_logger
from ..models.habit import Habit
from .grid import HabitWithLogs

if TYPE_CHECKING:  # pragma: no cover
    from ..tenants import TenantHandle

logger = get_logger(__name__)


class HabitStore:
    """Habit operations for one tenant, serialized by the tenant's lock."""

    def __init__(self, handle: "TenantHandle") -> None:
        self.handle = handle
        self.repo = handle.repository

    @property
    def tenant(self) -> str:
        return self.handle.name

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self.handle.lock:
            try:
                yield
            except HabitGridError:
                raise
            except SQLAlchemyError as exc:
                logger.error(
                    f"Storage failure during {name} for tenant {self.tenant}",
                    exc_info=True,
                    extra={"tenant": self.tenant, "operation": name},
                )
                raise StorageFailure(f"Storage failure during {name}") from exc

    # Habits
    def list_habits(self) -> list[Habit]:
        with self._operation("list"):
            return self.repo.list_habits()

    def get_habit(self, habit_id: int) -> HabitWithLogs:
        """Habit plus its 90 most recent logs, newest first."""
        with self._operation("get"):
            habit = self.repo.get_habit(habit_id)
            if habit is None:
                raise NotFound("Habit not found")
            return HabitWithLogs(habit=habit, logs=self.repo.recent_logs(habit_id))

    def habits_with_logs(self) -> list[HabitWithLogs]:
        """Every habit in display order with its recent logs."""
        with self._operation("habits_with_logs"):
            return [
                HabitWithLogs(habit=habit, logs=self.repo.recent_logs(habit.id))
                for habit in self.repo.list_habits()
                if habit.id is not None
            ]

    def create_habit(self, name: Optional[str], description: Optional[str] = "") -> Habit:
        form = validate_payload(HabitForm, {"name": name, "description": description})
        with self._operation("create"):
            habit = self.repo.create_habit(form.name, form.description)
        logger.info(
            f"Created habit {habit.id} for tenant {self.tenant}",
            extra={"tenant": self.tenant, "habit_id": habit.id, "order_position": habit.order_position},
        )
        return habit

    def update_habit(self, habit_id: int, name: Optional[str], description: Optional[str] = "") -> bool:
        """Overwrite a habit; an unknown id is a silent no-op (returns False)."""
        form = validate_payload(HabitForm, {"name": name, "description": description})
        with self._operation("update"):
            updated = self.repo.update_habit(habit_id, form.name, form.description)
        if not updated:
            logger.info(
                f"Update of missing habit {habit_id} ignored",
                extra={"tenant": self.tenant, "habit_id": habit_id},
            )
        return updated

    def delete_habit(self, habit_id: int) -> bool:
        with self._operation("delete"):
            log_count = self.repo.count_logs(habit_id)
            deleted = self.repo.delete_habit(habit_id)
        if deleted:
            logger.info(
                f"Deleted habit {habit_id} and {log_count} logs for tenant {self.tenant}",
                extra={"tenant": self.tenant, "habit_id": habit_id, "logs": log_count},
            )
        return deleted

    def reorder(self, habit_orders: Any) -> int:
        """Apply ``[{id, order_position}, ...]`` one entry at a time.

        Each entry commits on its own: a bad entry mid-batch raises after the
        earlier entries are already stored. Returns the number applied.
        """
        if not isinstance(habit_orders, list):
            raise ValidationError("habitOrders must be an array")

        applied = 0
        with self._operation("reorder"):
            for raw_entry in habit_orders:
                entry = validate_payload(ReorderEntry, raw_entry)
                self.repo.set_order_position(entry.id, entry.order_position)
                applied += 1
        logger.info(
            f"Reordered {applied} habits for tenant {self.tenant}",
            extra={"tenant": self.tenant, "count": applied},
        )
        return applied

    # Logs
    def toggle_log(self, habit_id: Any, day: Any) -> bool:
        """Flip completion for (habit, day), creating the row on first touch."""
        form = validate_payload(ToggleForm, {"habit_id": habit_id, "date": day})
        with self._operation("toggle"):
            if self.repo.get_habit(form.habit_id) is None:
                raise NotFound("Habit not found")
            completed = self.repo.toggle_log(form.habit_id, form.date)
        logger.debug(
            f"Toggled habit {form.habit_id} on {form.date.isoformat()} -> {completed}",
            extra={"tenant": self.tenant},
        )
        return completed

    def update_log_notes(self, log_id: int, notes: Optional[str]) -> bool:
        form = validate_payload(LogNotesForm, {"notes": notes})
        with self._operation("update_log"):
            return self.repo.update_log_notes(log_id, form.notes or "")

    def logs_between(self, start: Any, end: Any) -> list[dict[str, Any]]:
        """Logs for every habit dated within [start, end], newest first."""
        query = validate_payload(LogRangeQuery, {"start": start, "end": end})
        with self._operation("logs"):
            rows = self.repo.logs_between(query.start, query.end)
        payload: list[dict[str, Any]] = []
        for log, habit_name in rows:
            item = log.to_dict()
            item["habit_name"] = habit_name
            payload.append(item)
        return payload


__all__ = ["HabitStore"]
