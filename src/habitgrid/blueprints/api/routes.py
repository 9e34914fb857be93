"""Habit and log API routes."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from ...errors import ValidationError
from ...extensions import tenant_store
from ...presenters import layout_grid
from ...services.grid import GridLayout
from . import bp


def _json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _requested_layout() -> GridLayout:
    if request.args.get("mobile") in {"true", "1"}:
        return GridLayout.COMPACT
    raw = (request.args.get("layout") or GridLayout.FULL.value).lower()
    try:
        return GridLayout(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown layout '{raw}'") from exc


@bp.get("/habits")
def list_habits():
    """Habits in display order."""

    store = tenant_store()
    return jsonify([habit.to_dict() for habit in store.list_habits()])


@bp.get("/habits/<int:habit_id>")
def get_habit(habit_id: int):
    """One habit with its 90 most recent logs."""

    store = tenant_store()
    return jsonify(store.get_habit(habit_id).to_dict())


@bp.post("/habits")
def create_habit():
    payload = _json_body()
    store = tenant_store()
    habit = store.create_habit(payload.get("name"), payload.get("description"))
    return jsonify(habit.to_dict())


@bp.put("/habits/<int:habit_id>")
def update_habit(habit_id: int):
    payload = _json_body()
    store = tenant_store()
    store.update_habit(habit_id, payload.get("name"), payload.get("description"))
    return jsonify({"success": True})


@bp.delete("/habits/<int:habit_id>")
def delete_habit(habit_id: int):
    store = tenant_store()
    store.delete_habit(habit_id)
    return jsonify({"success": True})


@bp.post("/habits/reorder")
def reorder_habits():
    """Apply ``{"habitOrders": [{id, order_position}, ...]}``."""

    payload = _json_body()
    store = tenant_store()
    store.reorder(payload.get("habitOrders"))
    return jsonify({"success": True})


@bp.get("/logs")
def list_logs():
    """Logs for all habits between ``start`` and ``end`` (inclusive)."""

    store = tenant_store()
    return jsonify(store.logs_between(request.args.get("start"), request.args.get("end")))


@bp.post("/logs/toggle")
def toggle_log():
    payload = _json_body()
    store = tenant_store()
    completed = store.toggle_log(payload.get("habit_id"), payload.get("date"))
    return jsonify({"completed": completed})


@bp.put("/logs/<int:log_id>")
def update_log(log_id: int):
    payload = _json_body()
    store = tenant_store()
    store.update_log_notes(log_id, payload.get("notes"))
    return jsonify({"success": True})


@bp.get("/grid")
def grid():
    """Assembled grid for clients redrawing after a toggle."""

    layout = _requested_layout()
    store = tenant_store()
    return jsonify(layout_grid(store.habits_with_logs(), layout).to_dict())
