from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_duration, month_bounds
from ..core.enums import MANAGER_ROLES, AttendanceStatus, LeaveRequestType, RequestStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..leaves.balances import leave_duration
from ..leaves.repository import LeaveRepository
from ..users.model import User
from ..users.repository import UserRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .salary import SalaryBreakdown, SalaryCalculator

UNPAID_LEAVE_TYPES = (LeaveRequestType.LOSS_OF_PAY, LeaveRequestType.BACKDATED)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class PayrollReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        leaves: LeaveRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        salary: Optional[SalaryCalculator] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._leaves = leaves
        self._calculator = calculator or StandardPayrollCalculator()
        self._salary = salary or SalaryCalculator()

    @staticmethod
    def _require_manager(user: User) -> None:
        if user.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can access payroll")

    def build_attendance_report(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date must not be before start date")
        query_rows = self._attendance.get_report_rows(start=start, end=end, user_id=user_id)

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            minutes = self._calculator.worked_minutes(r)

            out_rows.append(
                {
                    "user_id": r.user_id,
                    "employee_code": r.employee_code,
                    "full_name": r.full_name,
                    "department": r.department or "-",
                    "date": r.attendance_date.isoformat(),
                    "clock_in": r.clock_in.strftime("%H:%M") if r.clock_in else "-",
                    "clock_out": r.clock_out.strftime("%H:%M") if r.clock_out else "-",
                    "worked": format_duration(minutes),
                    "shortfall": format_duration(self._calculator.shortfall_minutes(r)),
                    "unpaid_break": format_duration(r.unpaid_break_minutes),
                    "status": r.status.value,
                    "notes": r.notes or "",
                }
            )

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "employee_code": r.employee_code,
                    "full_name": r.full_name,
                    "days_present": 0,
                    "half_days": 0,
                    "late_days": 0,
                    "total_minutes": 0,
                }
                summary_map[r.user_id] = s
            s["days_present"] += 1
            s["half_days"] += 1 if r.status == AttendanceStatus.HALF_DAY else 0
            s["late_days"] += 1 if r.status == AttendanceStatus.LATE else 0
            s["total_minutes"] += minutes

        summary = sorted(summary_map.values(), key=lambda x: x["total_minutes"], reverse=True)
        for s in summary:
            s["total_hours"] = format_duration(s["total_minutes"])
        return ReportData(rows=out_rows, summary=summary)

    def unpaid_leave_days(self, user_id: int, year: int, month: int) -> float:
        """Approved LOP and backdated leave days falling inside the month."""
        start, end = month_bounds(int(year), int(month))
        total = 0.0
        for leave in self._leaves.list_overlapping(start=start, end=end, user_id=int(user_id)):
            if leave.request_type not in UNPAID_LEAVE_TYPES or leave.status != RequestStatus.APPROVED:
                continue
            in_month = [d for d in leave.leave_dates if start <= d <= end]
            total += leave_duration(in_month, leave.leave_type)
        return total

    def payslip(
        self,
        admin: User,
        *,
        user_id: int,
        ctc: float,
        year: int,
        month: int,
        bonus: float = 0,
        overtime_hours: float = 0,
    ) -> dict:
        self._require_manager(admin)
        employee = self._users.get_by_id(int(user_id))
        if not employee:
            raise NotFoundError("Employee not found")

        unpaid = self.unpaid_leave_days(employee.user_id, year, month)
        breakdown: SalaryBreakdown = self._salary.calculate(
            ctc, bonus=bonus, overtime_hours=overtime_hours, unpaid_leave_days=unpaid
        )
        return {
            "employee": {
                "id": employee.user_id,
                "employeeCode": employee.employee_code,
                "fullName": employee.full_name,
                "department": employee.department,
                "designation": employee.designation,
            },
            "period": f"{int(year):04d}-{int(month):02d}",
            "unpaidLeaveDays": unpaid,
            "salary": breakdown.to_dict(),
        }
