from __future__ import annotations

from datetime import date

from flask import Flask, g, jsonify, request

from ..auth.decorators import roles_required, token_required
from ..common.datetime_utils import add_days, parse_iso_date, today_ist
from ..common.http import json_body
from ..core.enums import Role
from ..core.exceptions import ValidationError


def _range_from_query() -> tuple[date, date]:
    today = today_ist()
    start_raw = request.args.get("startDate")
    end_raw = request.args.get("endDate")
    start = parse_iso_date(start_raw) if start_raw else add_days(today, -30)
    end = parse_iso_date(end_raw) if end_raw else today
    return start, end


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def register(app: Flask, container) -> None:
    attendance = container.attendance_service
    half_day = container.half_day_service

    @app.get("/api/attendance/status", endpoint="attendance_status")
    @token_required
    def attendance_status():
        return jsonify({"success": True, **attendance.today(g.current_user.user_id)})

    @app.post("/api/attendance/clock-in", endpoint="attendance_clock_in")
    @token_required
    def clock_in():
        log = attendance.clock_in(g.current_user.user_id)
        return jsonify({"success": True, "message": "Clocked in", "attendance": log.to_dict()}), 201

    @app.post("/api/attendance/clock-out", endpoint="attendance_clock_out")
    @token_required
    def clock_out():
        log = attendance.clock_out(g.current_user.user_id)
        return jsonify({"success": True, "message": "Clocked out", "attendance": log.to_dict()})

    @app.post("/api/attendance/start-break", endpoint="attendance_start_break")
    @token_required
    def start_break():
        data = json_body()
        paid = str(data.get("breakType", "paid")).lower() != "unpaid"
        log = attendance.start_break(g.current_user.user_id, paid=paid)
        return jsonify({"success": True, "attendance": log.to_dict()})

    @app.put("/api/attendance/end-break", endpoint="attendance_end_break")
    @token_required
    def end_break():
        log = attendance.end_break(g.current_user.user_id)
        return jsonify({"success": True, "attendance": log.to_dict()})

    @app.get("/api/attendance/history", endpoint="attendance_history")
    @token_required
    def my_history():
        start, end = _range_from_query()
        logs = attendance.history(g.current_user.user_id, start=start, end=end)
        return jsonify({"success": True, "logs": [log.to_dict() for log in logs]})

    @app.get("/api/attendance/calendar", endpoint="attendance_calendar")
    @token_required
    def my_calendar():
        today = today_ist()
        days = attendance.monthly_calendar(
            g.current_user.user_id,
            _int_arg("year", today.year),
            _int_arg("month", today.month),
        )
        return jsonify({"success": True, "days": [d.to_dict() for d in days]})

    @app.get("/api/attendance/weekly-late", endpoint="attendance_weekly_late")
    @token_required
    def weekly_late():
        stats = container.late_tracker.weekly_stats(g.current_user.user_id, today_ist())
        return jsonify({"success": True, **stats})

    @app.get("/api/admin/attendance/user/<int:user_id>", endpoint="admin_attendance_user")
    @roles_required(Role.ADMIN, Role.HR)
    def admin_user_history(user_id: int):
        start, end = _range_from_query()
        logs = attendance.history(user_id, start=start, end=end)
        return jsonify({"success": True, "logs": [log.to_dict() for log in logs]})

    @app.get("/api/admin/attendance/user/<int:user_id>/calendar", endpoint="admin_attendance_calendar")
    @roles_required(Role.ADMIN, Role.HR)
    def admin_user_calendar(user_id: int):
        today = today_ist()
        days = attendance.monthly_calendar(user_id, _int_arg("year", today.year), _int_arg("month", today.month))
        return jsonify({"success": True, "days": [d.to_dict() for d in days]})

    @app.post("/api/admin/attendance/<int:log_id>/half-day", endpoint="admin_mark_half_day")
    @roles_required(Role.ADMIN, Role.HR)
    def mark_half_day(log_id: int):
        log = half_day.mark_half_day(g.current_user, log_id, json_body().get("reason", ""))
        return jsonify({"success": True, "attendance": log.to_dict()})

    @app.delete("/api/admin/attendance/<int:log_id>/half-day", endpoint="admin_unmark_half_day")
    @roles_required(Role.ADMIN, Role.HR)
    def unmark_half_day(log_id: int):
        log = half_day.unmark_half_day(g.current_user, log_id, json_body().get("reason", ""))
        return jsonify({"success": True, "attendance": log.to_dict()})
