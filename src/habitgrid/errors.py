"""Error taxonomy and Flask error handlers."""

from __future__ import annotations

from typing import Any

import pydantic
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .logging_config import get_logger

logger = get_logger(__name__)


class HabitGridError(Exception):
    """Base error surfaced to API callers."""

    status_code = 400
    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ValidationError(HabitGridError):
    """Missing or malformed input (empty habit name, bad tenant, bad date)."""

    code = "validation_error"


class NotFound(HabitGridError):
    """Unknown habit in the tenant's namespace."""

    status_code = 404
    code = "not_found"


class StorageFailure(HabitGridError):
    """The tenant database could not be read or written."""

    code = "storage_failure"


def from_pydantic(exc: pydantic.ValidationError) -> ValidationError:
    """Collapse a pydantic error into a single readable ValidationError."""

    messages: list[str] = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        msg = error.get("msg", "Invalid value")
        # pydantic prefixes custom validator messages
        msg = msg.removeprefix("Value error, ")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return ValidationError("; ".join(messages) or "Invalid input")


def error_response(exc: HabitGridError):
    """JSON response for an error from the taxonomy."""

    if isinstance(exc, StorageFailure):
        logger.error(f"Storage failure on {request.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.path}: {exc.message}")
    return jsonify(exc.to_dict()), exc.status_code


def unexpected_error_response(exc: Exception):
    """Catch-all for API routes: anything unclassified becomes a 400 with its message."""

    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, HabitGridError):
        return error_response(exc)
    if isinstance(exc, pydantic.ValidationError):
        return error_response(from_pydantic(exc))
    logger.error(f"Unhandled error on {request.method} {request.path}", exc_info=exc)
    return jsonify({"error": str(exc) or exc.__class__.__name__, "code": "error"}), 400


def register_error_handlers(app: Flask) -> None:
    """Map the error taxonomy onto JSON responses."""

    app.register_error_handler(HabitGridError, error_response)
    app.register_error_handler(
        pydantic.ValidationError, lambda exc: error_response(from_pydantic(exc))
    )
