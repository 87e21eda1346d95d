from datetime import date, datetime

from src.ams_portal.ams_portal.attendance.model import AttendanceReportRow
from src.ams_portal.ams_portal.core.enums import AttendanceStatus
from src.ams_portal.ams_portal.payroll.calculator.standard_calculator import StandardPayrollCalculator


def _row(clock_out, *, paid=0, unpaid=0) -> AttendanceReportRow:
    return AttendanceReportRow(
        user_id=1,
        employee_code="EMP001",
        full_name="A",
        department=None,
        attendance_date=date(2026, 10, 14),
        clock_in=datetime(2026, 10, 14, 9, 0),
        clock_out=clock_out,
        paid_break_minutes=paid,
        unpaid_break_minutes=unpaid,
        status=AttendanceStatus.ON_TIME,
    )


def test_standard_calculator_subtracts_unpaid_break_only():
    calc = StandardPayrollCalculator()

    assert calc.worked_minutes(_row(datetime(2026, 10, 14, 18, 0), paid=30, unpaid=60)) == 8 * 60


def test_open_day_counts_zero():
    assert StandardPayrollCalculator().worked_minutes(_row(None)) == 0


def test_never_negative():
    assert StandardPayrollCalculator().worked_minutes(_row(datetime(2026, 10, 14, 9, 30), unpaid=45)) == 0


def test_shortfall_against_full_day():
    calc = StandardPayrollCalculator()

    assert calc.shortfall_minutes(_row(datetime(2026, 10, 14, 14, 0))) == 210
    assert calc.shortfall_minutes(_row(datetime(2026, 10, 14, 18, 30))) == 0
    assert calc.shortfall_minutes(_row(None)) == 0
