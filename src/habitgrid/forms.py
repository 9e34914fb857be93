"""Request payload models."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import from_pydantic

FormT = TypeVar("FormT", bound=BaseModel)


class HabitForm(BaseModel):
    """Payload for creating or editing a habit."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(default="", description="Short label for the habit")
    description: str = Field(default="", description="Optional details about the habit")

    @field_validator("name", mode="before")
    @classmethod
    def coerce_missing_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Ensure the habit name is present."""

        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def coerce_missing_description(cls, value: Any) -> Any:
        return "" if value is None else value


class ToggleForm(BaseModel):
    """Payload for flipping a habit's completion on a date."""

    habit_id: int
    date: dt.date


class ReorderEntry(BaseModel):
    """One ``{id, order_position}`` pair of a reorder batch."""

    id: int
    order_position: int


class LogNotesForm(BaseModel):
    notes: Optional[str] = ""

    @field_validator("notes", mode="before")
    @classmethod
    def coerce_missing_notes(cls, value: Any) -> Any:
        return "" if value is None else value


class LogRangeQuery(BaseModel):
    """Inclusive ISO date range for the log listing."""

    start: dt.date
    end: dt.date


def validate_payload(model: type[FormT], payload: Any) -> FormT:
    """Validate ``payload`` against ``model``, raising the app's ValidationError."""

    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise from_pydantic(exc) from exc


__all__ = [
    "HabitForm",
    "LogNotesForm",
    "LogRangeQuery",
    "ReorderEntry",
    "ToggleForm",
    "validate_payload",
]
