from datetime import date, datetime

from src.ams_portal.ams_portal.attendance.model import AttendanceLog
from src.ams_portal.ams_portal.attendance.status_resolver import resolve_day_status
from src.ams_portal.ams_portal.core.enums import (
    AttendanceStatus,
    LeaveDayType,
    LeaveRequestType,
    RequestStatus,
    SaturdayPolicy,
)
from src.ams_portal.ams_portal.leaves.model import LeaveRequest
from src.ams_portal.ams_portal.workdays.model import Holiday

TODAY = date(2026, 10, 14)


def _leave(day: date, request_type=LeaveRequestType.CASUAL, leave_type=LeaveDayType.FULL_DAY) -> LeaveRequest:
    return LeaveRequest(
        request_id=7,
        user_id=1,
        request_type=request_type,
        leave_dates=(day,),
        reason="x",
        leave_type=leave_type,
        status=RequestStatus.APPROVED,
    )


def _worked(day: date, hours_out: int, status=AttendanceStatus.ON_TIME) -> AttendanceLog:
    return AttendanceLog(
        log_id=1,
        user_id=1,
        attendance_date=day,
        clock_in=datetime(day.year, day.month, day.day, 9, 0),
        clock_out=datetime(day.year, day.month, day.day, hours_out, 0),
        status=status,
    )


def test_holiday_beats_leave():
    day = date(2026, 10, 2)
    result = resolve_day_status(
        day,
        today=TODAY,
        holidays=[Holiday(1, "Gandhi Jayanti", day)],
        approved_leaves=[_leave(day)],
    )

    assert result.status == "Holiday - Gandhi Jayanti"
    assert not result.is_on_leave


def test_tentative_holiday_is_ignored():
    day = date(2026, 10, 9)
    result = resolve_day_status(day, today=TODAY, holidays=[Holiday(1, "Maybe", day, is_tentative=True)])

    assert result.status == "Absent"


def test_leave_labels():
    day = date(2026, 10, 12)

    assert resolve_day_status(day, today=TODAY, approved_leaves=[_leave(day)]).status == "Leave - Casual (Full Day)"
    comp_off = resolve_day_status(day, today=TODAY, approved_leaves=[_leave(day, LeaveRequestType.COMPENSATORY)])
    assert comp_off.status == "Comp Off"
    assert comp_off.is_on_leave


def test_weekends():
    assert resolve_day_status(date(2026, 10, 11), today=TODAY).status == "Weekend"
    saturday = date(2026, 10, 3)
    assert resolve_day_status(saturday, today=TODAY, saturday_policy=SaturdayPolicy.WEEK_1_3_OFF).status == "Week Off"
    assert resolve_day_status(saturday, today=TODAY, saturday_policy=SaturdayPolicy.WEEK_2_4_OFF).status == "Absent"


def test_presence_from_worked_hours():
    day = date(2026, 10, 13)

    assert resolve_day_status(day, today=TODAY, log=_worked(day, 18)).status == "Present"
    assert resolve_day_status(day, today=TODAY, log=_worked(day, 14)).status == "Half Day"


def test_open_log_uses_stored_status():
    log = AttendanceLog(
        log_id=1,
        user_id=1,
        attendance_date=TODAY,
        clock_in=datetime(2026, 10, 14, 9, 20),
        status=AttendanceStatus.LATE,
    )

    assert resolve_day_status(TODAY, today=TODAY, log=log).status == "Late"


def test_today_and_future_without_log():
    assert resolve_day_status(TODAY, today=TODAY).status == "N/A"
    assert resolve_day_status(date(2026, 10, 20), today=TODAY).status == "N/A"
    assert resolve_day_status(date(2026, 10, 13), today=TODAY).status == "Absent"
