from __future__ import annotations

import io
from typing import Iterable

import pandas as pd

from ..leaves.balances import request_duration
from ..leaves.model import LeaveRequest
from ..payroll.service import ReportData
from ..users.model import User

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ATTENDANCE_COLUMNS = {
    "employee_code": "Employee Code",
    "full_name": "Employee Name",
    "department": "Department",
    "date": "Date",
    "clock_in": "Clock In",
    "clock_out": "Clock Out",
    "worked": "Work Duration",
    "shortfall": "Short of Full Day",
    "unpaid_break": "Unpaid Break",
    "status": "Status",
    "notes": "Notes",
}
SUMMARY_COLUMNS = {
    "employee_code": "Employee Code",
    "full_name": "Employee Name",
    "days_present": "Days Present",
    "late_days": "Late Days",
    "half_days": "Half Days",
    "total_hours": "Total Hours",
}


def _frame(rows: list[dict], columns: dict[str, str]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=list(columns))
    return df.rename(columns=columns)


def attendance_report_xlsx(report: ReportData) -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        _frame(report.rows, ATTENDANCE_COLUMNS).to_excel(writer, index=False, sheet_name="Attendance")
        _frame(report.summary, SUMMARY_COLUMNS).to_excel(writer, index=False, sheet_name="Summary")
    output.seek(0)
    return output


def leave_report_xlsx(requests: Iterable[LeaveRequest], users: dict[int, User]) -> io.BytesIO:
    rows = []
    for r in requests:
        user = users.get(r.user_id)
        rows.append(
            {
                "Employee Code": user.employee_code if user else "",
                "Employee Name": user.full_name if user else "",
                "Request Type": r.request_type.value,
                "Leave Type": r.leave_type.value,
                "Start Date": r.start_date.isoformat() if r.start_date else "",
                "End Date": r.end_date.isoformat() if r.end_date else "",
                "Days": request_duration(r),
                "Status": r.status.value,
                "Reason": r.reason,
                "Rejection Notes": r.rejection_notes or "",
            }
        )

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(
            rows,
            columns=[
                "Employee Code",
                "Employee Name",
                "Request Type",
                "Leave Type",
                "Start Date",
                "End Date",
                "Days",
                "Status",
                "Reason",
                "Rejection Notes",
            ],
        ).to_excel(writer, index=False, sheet_name="Leaves")
    output.seek(0)
    return output
