from datetime import date, datetime

import pytest

from src.ams_portal.ams_portal.attendance.model import AttendanceLog
from src.ams_portal.ams_portal.core.enums import (
    AttendanceStatus,
    LeaveDayType,
    LeaveRequestType,
    RequestStatus,
    Role,
)
from src.ams_portal.ams_portal.core.exceptions import AuthorizationError
from src.ams_portal.ams_portal.leaves.model import LeaveRequest
from src.ams_portal.ams_portal.payroll.service import PayrollReportService


@pytest.fixture
def service(attendance_repo, users_repo, leaves_repo, make_user):
    users_repo.add(make_user(1, full_name="Ravi", department="Engineering"))
    users_repo.add(make_user(2, full_name="Meera"))
    return PayrollReportService(attendance_repo, users_repo, leaves_repo)


def _log(user_id, day, out_hour, status=AttendanceStatus.ON_TIME, unpaid=0):
    return AttendanceLog(
        log_id=0,
        user_id=user_id,
        attendance_date=date(2026, 10, day),
        clock_in=datetime(2026, 10, day, 9, 0),
        clock_out=datetime(2026, 10, day, out_hour, 0),
        unpaid_break_minutes=unpaid,
        status=status,
    )


def test_attendance_report_summary(service, attendance_repo):
    attendance_repo.create(_log(1, 12, 18, unpaid=30))
    attendance_repo.create(_log(1, 13, 14, status=AttendanceStatus.HALF_DAY))
    attendance_repo.create(_log(2, 12, 18, status=AttendanceStatus.LATE))

    report = service.build_attendance_report(start=date(2026, 10, 1), end=date(2026, 10, 31))

    assert len(report.rows) == 3
    assert report.rows[0]["worked"] == "8h 30m"
    assert report.rows[0]["shortfall"] == "0h 0m"
    assert report.rows[2]["shortfall"] == "3h 30m"
    ravi, meera = report.summary
    assert (ravi["full_name"], ravi["days_present"], ravi["half_days"]) == ("Ravi", 2, 1)
    assert ravi["total_hours"] == "13h 30m"
    assert meera["late_days"] == 1


def test_unpaid_leave_days_only_count_approved_lop_in_month(service, leaves_repo):
    for request_type, status, days, leave_type in (
        (LeaveRequestType.LOSS_OF_PAY, RequestStatus.APPROVED, (date(2026, 9, 30), date(2026, 10, 1)), LeaveDayType.FULL_DAY),
        (LeaveRequestType.BACKDATED, RequestStatus.APPROVED, (date(2026, 10, 5),), LeaveDayType.FIRST_HALF),
        (LeaveRequestType.LOSS_OF_PAY, RequestStatus.PENDING, (date(2026, 10, 6),), LeaveDayType.FULL_DAY),
        (LeaveRequestType.CASUAL, RequestStatus.APPROVED, (date(2026, 10, 7),), LeaveDayType.FULL_DAY),
    ):
        leaves_repo.add(
            LeaveRequest(
                request_id=0,
                user_id=1,
                request_type=request_type,
                leave_dates=days,
                reason="r",
                leave_type=leave_type,
                status=status,
            )
        )

    assert service.unpaid_leave_days(1, 2026, 10) == 1.5


def test_payslip_requires_manager(service, users_repo, make_user):
    hr = make_user(50, role=Role.HR)

    payslip = service.payslip(hr, user_id=1, ctc=600000, year=2026, month=10)

    assert payslip["period"] == "2026-10"
    assert payslip["salary"]["gross"] == 450000
    with pytest.raises(AuthorizationError):
        service.payslip(users_repo.get_by_id(2), user_id=1, ctc=600000, year=2026, month=10)
