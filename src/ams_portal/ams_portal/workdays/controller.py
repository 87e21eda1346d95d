from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..auth.decorators import roles_required, token_required
from ..common.datetime_utils import today_ist
from ..common.http import json_body, parse_json_date
from ..core.enums import Role


def register(app: Flask, container) -> None:
    holidays = container.holiday_service

    @app.get("/api/holidays", endpoint="holidays_list")
    @token_required
    def list_holidays():
        year = request.args.get("year", default=today_ist().year, type=int)
        rows = holidays.list_year(year)
        return jsonify({"success": True, "holidays": [h.to_dict() for h in rows]})

    @app.post("/api/admin/holidays", endpoint="holidays_create")
    @roles_required(Role.ADMIN, Role.HR)
    def create_holiday():
        data = json_body()
        holiday_id = holidays.add(
            current_role=g.current_user.role,
            name=data.get("name", ""),
            holiday_date=parse_json_date(data.get("date"), "date"),
            is_tentative=bool(data.get("isTentative", False)),
        )
        return jsonify({"success": True, "id": holiday_id}), 201

    @app.post("/api/admin/holidays/import", endpoint="holidays_import")
    @roles_required(Role.ADMIN, Role.HR)
    def import_holidays():
        upload = request.files.get("file")
        if upload is None:
            return jsonify({"success": False, "message": "No file uploaded"}), 400
        created = holidays.import_excel(current_role=g.current_user.role, source=upload.stream)
        return jsonify({"success": True, "created": created}), 201

    @app.delete("/api/admin/holidays/<int:holiday_id>", endpoint="holidays_delete")
    @roles_required(Role.ADMIN, Role.HR)
    def delete_holiday(holiday_id: int):
        holidays.delete(current_role=g.current_user.role, holiday_id=holiday_id)
        return jsonify({"success": True, "message": "Holiday deleted"})
