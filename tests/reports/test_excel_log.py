from datetime import date, datetime

from openpyxl import load_workbook

from src.ams_portal.ams_portal.attendance.model import AttendanceLog
from src.ams_portal.ams_portal.core.enums import AttendanceStatus, ExcelLogType
from src.ams_portal.ams_portal.reports.excel_log import EVENT_SHEET, ExcelLogService


def _log(**overrides) -> AttendanceLog:
    values = dict(
        log_id=1,
        user_id=1,
        attendance_date=date(2026, 10, 14),
        clock_in=datetime(2026, 10, 14, 9, 5),
    )
    values.update(overrides)
    return AttendanceLog(**values)


def test_attendance_row_is_upserted(tmp_path, make_user):
    service = ExcelLogService(tmp_path / "logs" / "attendance.xlsx")
    user = make_user(1)

    service.upsert_attendance_row(user, _log())
    service.upsert_attendance_row(
        user, _log(clock_out=datetime(2026, 10, 14, 18, 5), paid_break_minutes=30, status=AttendanceStatus.LATE)
    )

    rows = service.read_month(2026, 10)
    assert len(rows) == 1
    assert rows[0]["Employee Code"] == "EMP001"
    assert rows[0]["Status"] == "Late"
    assert rows[0]["Clock Out"] == "18:05:00"
    assert rows[0]["Work Duration"] == "8h 30m"
    assert rows[0]["Break Duration"] == "0h 30m"


def test_events_are_appended(tmp_path, make_user):
    path = tmp_path / "attendance.xlsx"
    service = ExcelLogService(path)

    service.log_event(make_user(1), ExcelLogType.LOGIN_SUCCESS, "local", at=datetime(2026, 10, 14, 8, 59))
    service.log_event(None, ExcelLogType.LOGIN_FAIL, "ghost@example.com")

    sheet = load_workbook(path)[EVENT_SHEET]
    values = list(sheet.iter_rows(values_only=True))
    assert values[0][0] == "Timestamp"
    assert values[1][:4] == ("2026-10-14 08:59:00", "EMP001", "Employee 1", "LOGIN_SUCCESS")
    assert values[2][3] == "LOGIN_FAIL"


def test_missing_month_reads_empty(tmp_path):
    assert ExcelLogService(tmp_path / "none.xlsx").read_month(2026, 1) == []


def test_corrupt_workbook_is_logged_not_raised(tmp_path, make_user, caplog):
    path = tmp_path / "attendance.xlsx"
    path.write_bytes(b"not a zip archive")
    service = ExcelLogService(path)

    service.upsert_attendance_row(make_user(1), _log())
    service.log_event(make_user(1), ExcelLogType.CLOCK_IN, "09:05")

    assert path.read_bytes() == b"not a zip archive"
    assert "Could not update Excel attendance row for EMP001" in caplog.text
    assert "Could not write CLOCK_IN to Excel log" in caplog.text
