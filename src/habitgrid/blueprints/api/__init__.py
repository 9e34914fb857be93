"""JSON API blueprint package."""

from __future__ import annotations

from flask import Blueprint

from ...errors import unexpected_error_response

bp = Blueprint("api", __name__, url_prefix="/api")
bp.register_error_handler(Exception, unexpected_error_response)

from . import routes  # noqa: E402,F401 - import routes for registration

__all__ = ["bp"]
