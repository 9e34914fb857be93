"""Completion lookups and streak computation for habit logs."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, timedelta
from typing import Any, Iterable

STREAK_LOOKBACK_DAYS = 90


def as_date(value: date | str) -> date:
    """Coerce a log date (``date`` or ISO ``YYYY-MM-DD`` string) to ``date``."""

    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _field(log: Any, name: str) -> Any:
    if isinstance(log, Mapping):
        return log.get(name)
    return getattr(log, name, None)


def completed_days(logs: Iterable[Any] | None) -> set[date]:
    """Return the calendar days with a completed log entry.

    Accepts ``HabitLog`` rows or the dict form used in hydration data.
    """

    days: set[date] = set()
    for log in logs or ():
        if not _field(log, "completed"):
            continue
        raw = _field(log, "date")
        if raw:
            days.add(as_date(raw))
    return days


def is_completed_on(logs: Iterable[Any] | None, day: date) -> bool:
    """True iff a completed log exists for ``day``; missing entries count as not done."""

    return day in completed_days(logs)


def current_streak(
    logs: Iterable[Any] | None,
    *,
    today: date | None = None,
    lookback: int = STREAK_LOOKBACK_DAYS,
) -> int:
    """Count consecutive completed days walking backward from today.

    Stops at the first gap or after ``lookback`` days, so a run longer than
    the lookback still reports ``lookback``. Today must be completed for the
    streak to be non-zero.
    """

    done = completed_days(logs)
    if not done:
        return 0

    streak = 0
    cursor = today or date.today()
    for _ in range(lookback):
        if cursor not in done:
            break
        streak += 1
        cursor -= timedelta(days=1)
    return streak


__all__ = [
    "STREAK_LOOKBACK_DAYS",
    "as_date",
    "completed_days",
    "current_streak",
    "is_completed_on",
]
