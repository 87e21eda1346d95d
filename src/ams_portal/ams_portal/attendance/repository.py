from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceLog, AttendanceReportRow, WeeklyLateRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, log_id: int) -> Optional[AttendanceLog]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, attendance_date: date) -> Optional[AttendanceLog]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, start: date, end: date) -> Sequence[AttendanceLog]:
        raise NotImplementedError

    def create(self, log: AttendanceLog) -> int:
        raise NotImplementedError

    def save(self, log: AttendanceLog) -> bool:
        raise NotImplementedError

    def get_report_rows(self, *, start: date, end: date, user_id: Optional[int] = None) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError


class WeeklyLateRepository(Protocol):
    def get(self, user_id: int, week_start: date) -> Optional[WeeklyLateRecord]:
        raise NotImplementedError

    def upsert(self, record: WeeklyLateRecord) -> None:
        raise NotImplementedError
