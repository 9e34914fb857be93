"""Service module exports."""

from . import grid, habits, store

__all__ = [
    "grid",
    "habits",
    "store",
]
