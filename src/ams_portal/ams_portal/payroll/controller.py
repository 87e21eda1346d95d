from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..auth.decorators import roles_required
from ..common.datetime_utils import parse_iso_date, today_ist
from ..common.http import json_body
from ..core.enums import Role
from ..core.exceptions import ValidationError


def _number(data: dict, key: str, default=None):
    value = data.get(key, default)
    if value is None:
        raise ValidationError(f"{key} is required")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number")


def register(app: Flask, container) -> None:
    payroll = container.payroll_report_service

    @app.get("/api/payroll/attendance-report", endpoint="payroll_attendance_report")
    @roles_required(Role.ADMIN, Role.HR)
    def attendance_report():
        today = today_ist()
        start = parse_iso_date(request.args.get("startDate") or today.replace(day=1).isoformat())
        end = parse_iso_date(request.args.get("endDate") or today.isoformat())
        user_id = request.args.get("userId", type=int)
        report = payroll.build_attendance_report(start=start, end=end, user_id=user_id)
        return jsonify({"success": True, "rows": report.rows, "summary": report.summary})

    @app.post("/api/payroll/calculate", endpoint="payroll_calculate")
    @roles_required(Role.ADMIN, Role.HR)
    def calculate():
        data = json_body()
        today = today_ist()
        slip = payroll.payslip(
            g.current_user,
            user_id=int(_number(data, "userId")),
            ctc=_number(data, "ctc"),
            year=int(_number(data, "year", today.year)),
            month=int(_number(data, "month", today.month)),
            bonus=_number(data, "bonus", 0),
            overtime_hours=_number(data, "overtimeHours", 0),
        )
        return jsonify({"success": True, **slip})
