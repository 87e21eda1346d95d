from __future__ import annotations

from flask import Flask, g, jsonify

from ..auth.decorators import roles_required, token_required
from ..common.http import json_body
from ..core.enums import Role


def _shift_fields(data: dict) -> dict:
    return {
        "name": data.get("name", ""),
        "shift_type": data.get("shiftType", "Fixed"),
        "start_time": data.get("startTime"),
        "end_time": data.get("endTime"),
        "duration_hours": data.get("durationHours"),
        "paid_break_minutes": int(data.get("paidBreakMinutes") or 30),
    }


def register(app: Flask, container) -> None:
    shifts = container.shift_service

    @app.get("/api/shifts", endpoint="shifts_list")
    @token_required
    def list_shifts():
        return jsonify({"success": True, "shifts": [s.to_dict() for s in shifts.list_all()]})

    @app.get("/api/shifts/<int:shift_id>", endpoint="shifts_get")
    @token_required
    def get_shift(shift_id: int):
        return jsonify({"success": True, "shift": shifts.get(shift_id).to_dict()})

    @app.post("/api/shifts", endpoint="shifts_create")
    @roles_required(Role.ADMIN)
    def create_shift():
        shift_id = shifts.create(current_role=g.current_user.role, **_shift_fields(json_body()))
        return jsonify({"success": True, "shift": shifts.get(shift_id).to_dict()}), 201

    @app.put("/api/shifts/<int:shift_id>", endpoint="shifts_update")
    @roles_required(Role.ADMIN)
    def update_shift(shift_id: int):
        shift = shifts.update(current_role=g.current_user.role, shift_id=shift_id, **_shift_fields(json_body()))
        return jsonify({"success": True, "shift": shift.to_dict()})
