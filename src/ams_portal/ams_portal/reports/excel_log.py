"""Attendance and event log kept in a single Excel workbook.

Sheets are per month ("October-2026"), one row per (date, employee code),
plus an append-only "Event Log" sheet.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from ..attendance.model import AttendanceLog
from ..common.datetime_utils import format_duration, now_ist
from ..core.enums import ExcelLogType
from ..users.model import User

logger = logging.getLogger(__name__)

ATTENDANCE_HEADERS = [
    "Date",
    "Employee Code",
    "Employee Name",
    "Status",
    "Clock In",
    "Clock Out",
    "Work Duration",
    "Break Duration",
    "Notes",
]
EVENT_SHEET = "Event Log"
EVENT_HEADERS = ["Timestamp", "Employee Code", "Employee Name", "Event", "Details"]
# missing, unreadable or corrupt workbook
WORKBOOK_ERRORS = (OSError, BadZipFile, InvalidFileException, KeyError)


def month_sheet_name(value) -> str:
    return f"{value.strftime('%B')}-{value.year}"


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M:%S") if value else ""


class ExcelLogService:
    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _open(self) -> Workbook:
        if self._path.exists():
            return load_workbook(self._path)
        wb = Workbook()
        wb.remove(wb.active)
        return wb

    def _save(self, wb: Workbook) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(self._path)

    @staticmethod
    def _sheet(wb: Workbook, name: str, headers: list[str]):
        if name in wb.sheetnames:
            return wb[name]
        ws = wb.create_sheet(title=name)
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        return ws

    def upsert_attendance_row(self, user: User, log: AttendanceLog, *, status: Optional[str] = None) -> None:
        date_text = log.attendance_date.isoformat()
        values = [
            date_text,
            user.employee_code,
            user.full_name,
            status or log.status.value,
            _fmt_time(log.clock_in),
            _fmt_time(log.clock_out),
            format_duration(log.worked_minutes()),
            format_duration(log.break_minutes),
            log.notes or "",
        ]

        try:
            with self._lock:
                wb = self._open()
                ws = self._sheet(wb, month_sheet_name(log.attendance_date), ATTENDANCE_HEADERS)

                target_row = None
                for row in ws.iter_rows(min_row=2):
                    if str(row[0].value) == date_text and str(row[1].value) == user.employee_code:
                        target_row = row[0].row
                        break

                if target_row is None:
                    ws.append(values)
                else:
                    for col, value in enumerate(values, start=1):
                        ws.cell(row=target_row, column=col, value=value)
                self._save(wb)
        except WORKBOOK_ERRORS:
            logger.exception("Could not update Excel attendance row for %s", user.employee_code)

    def log_event(self, user: Optional[User], log_type: ExcelLogType, details: str = "", *, at: Optional[datetime] = None) -> None:
        """Append an audit event; failures are logged and swallowed."""
        stamp = (at or now_ist()).strftime("%Y-%m-%d %H:%M:%S")
        try:
            with self._lock:
                wb = self._open()
                ws = self._sheet(wb, EVENT_SHEET, EVENT_HEADERS)
                ws.append(
                    [
                        stamp,
                        user.employee_code if user else "",
                        user.full_name if user else "",
                        log_type.value,
                        details,
                    ]
                )
                self._save(wb)
        except WORKBOOK_ERRORS:
            logger.exception("Could not write %s to Excel log", log_type.value)

    def read_month(self, year: int, month: int) -> list[dict]:
        sheet = month_sheet_name(datetime(year, month, 1))
        with self._lock:
            if not self._path.exists():
                return []
            wb = load_workbook(self._path, read_only=True)
            try:
                if sheet not in wb.sheetnames:
                    return []
                rows = list(wb[sheet].iter_rows(values_only=True))
            finally:
                wb.close()
        if not rows:
            return []
        header = list(rows[0])
        return [dict(zip(header, r)) for r in rows[1:]]
