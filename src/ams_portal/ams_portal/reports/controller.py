from __future__ import annotations

from flask import Flask, g, jsonify, request, send_file

from ..auth.decorators import roles_required
from ..common.datetime_utils import parse_iso_date, today_ist
from ..core.enums import Role
from .export import XLSX_MIMETYPE, attendance_report_xlsx, leave_report_xlsx


def register(app: Flask, container) -> None:
    @app.get("/api/reports/attendance.xlsx", endpoint="report_attendance_xlsx")
    @roles_required(Role.ADMIN, Role.HR)
    def attendance_xlsx():
        today = today_ist()
        start = parse_iso_date(request.args.get("startDate") or today.replace(day=1).isoformat())
        end = parse_iso_date(request.args.get("endDate") or today.isoformat())
        report = container.payroll_report_service.build_attendance_report(
            start=start, end=end, user_id=request.args.get("userId", type=int)
        )
        return send_file(
            attendance_report_xlsx(report),
            download_name=f"attendance_{start.isoformat()}_{end.isoformat()}.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )

    @app.get("/api/reports/leaves.xlsx", endpoint="report_leaves_xlsx")
    @roles_required(Role.ADMIN, Role.HR)
    def leaves_xlsx():
        rows = container.leave_service.list_all(
            g.current_user,
            status=request.args.get("status"),
            year=request.args.get("year", type=int),
            month=request.args.get("month", type=int),
        )
        users = {u.user_id: u for u in container.users_repo.list_users(active_only=False)}
        return send_file(
            leave_report_xlsx(rows, users),
            download_name="leave_report.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )

    @app.get("/api/reports/excel-log", endpoint="report_excel_log")
    @roles_required(Role.ADMIN, Role.HR)
    def excel_log_month():
        today = today_ist()
        rows = container.excel_log.read_month(
            request.args.get("year", default=today.year, type=int),
            request.args.get("month", default=today.month, type=int),
        )
        return jsonify({"success": True, "rows": rows})

    @app.get("/api/reports/excel-log/download", endpoint="report_excel_log_download")
    @roles_required(Role.ADMIN, Role.HR)
    def excel_log_download():
        path = container.excel_log.path.resolve()
        if not path.exists():
            return jsonify({"success": False, "message": "No Excel log recorded yet"}), 404
        return send_file(path, download_name=path.name, as_attachment=True, mimetype=XLSX_MIMETYPE)
