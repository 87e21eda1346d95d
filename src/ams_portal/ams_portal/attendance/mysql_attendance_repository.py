from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AdminOverride, AttendanceStatus, HalfDaySource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_dates, fetchall, fetchone, load_dates, normalize_mysql_date
from .model import AttendanceLog, AttendanceReportRow, WeeklyLateRecord
from .repository import AttendanceRepository, WeeklyLateRepository

_COLUMNS = """
    id, user_id, attendance_date, clock_in, clock_out,
    paid_break_minutes, unpaid_break_minutes, break_started_at, break_is_paid,
    status, is_late, late_minutes, is_half_day, half_day_reason, half_day_source,
    admin_override, override_by, override_at, override_reason, notes
"""


def _row_to_log(r: dict) -> AttendanceLog:
    return AttendanceLog(
        log_id=int(r["id"]),
        user_id=int(r["user_id"]),
        attendance_date=normalize_mysql_date(r["attendance_date"]),
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        paid_break_minutes=int(r.get("paid_break_minutes") or 0),
        unpaid_break_minutes=int(r.get("unpaid_break_minutes") or 0),
        break_started_at=r.get("break_started_at"),
        break_is_paid=None if r.get("break_is_paid") is None else bool(r["break_is_paid"]),
        status=AttendanceStatus(r["status"]),
        is_late=bool(r.get("is_late")),
        late_minutes=int(r.get("late_minutes") or 0),
        is_half_day=bool(r.get("is_half_day")),
        half_day_reason=r.get("half_day_reason"),
        half_day_source=HalfDaySource(r["half_day_source"]) if r.get("half_day_source") else None,
        admin_override=AdminOverride(r.get("admin_override") or AdminOverride.NONE.value),
        override_by=r.get("override_by"),
        override_at=r.get("override_at"),
        override_reason=r.get("override_reason"),
        notes=r.get("notes"),
    )


def _log_params(log: AttendanceLog) -> tuple:
    return (
        log.clock_in,
        log.clock_out,
        int(log.paid_break_minutes),
        int(log.unpaid_break_minutes),
        log.break_started_at,
        None if log.break_is_paid is None else int(log.break_is_paid),
        log.status.value,
        int(log.is_late),
        int(log.late_minutes),
        int(log.is_half_day),
        log.half_day_reason,
        log.half_day_source.value if log.half_day_source else None,
        log.admin_override.value,
        log.override_by,
        log.override_at,
        log.override_reason,
        log.notes,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, log_id: int) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_logs WHERE id=%s", (int(log_id),))
            r = fetchone(cur)
            return _row_to_log(r) if r else None

    def get_for_user_and_date(self, user_id: int, attendance_date: date) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_logs WHERE user_id=%s AND attendance_date=%s",
                (int(user_id), attendance_date),
            )
            r = fetchone(cur)
            return _row_to_log(r) if r else None

    def list_for_user(self, user_id: int, *, start: date, end: date) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE user_id=%s AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date DESC
                """,
                (int(user_id), start, end),
            )
            return [_row_to_log(r) for r in fetchall(cur)]

    def create(self, log: AttendanceLog) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_logs(
                    user_id, attendance_date, clock_in, clock_out,
                    paid_break_minutes, unpaid_break_minutes, break_started_at, break_is_paid,
                    status, is_late, late_minutes, is_half_day, half_day_reason, half_day_source,
                    admin_override, override_by, override_at, override_reason, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(log.user_id), log.attendance_date) + _log_params(log),
            )
            return int(cur.lastrowid)

    def save(self, log: AttendanceLog) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_logs
                SET clock_in=%s, clock_out=%s,
                    paid_break_minutes=%s, unpaid_break_minutes=%s, break_started_at=%s, break_is_paid=%s,
                    status=%s, is_late=%s, late_minutes=%s, is_half_day=%s, half_day_reason=%s,
                    half_day_source=%s, admin_override=%s, override_by=%s, override_at=%s,
                    override_reason=%s, notes=%s
                WHERE id=%s
                """,
                _log_params(log) + (int(log.log_id),),
            )
            return cur.rowcount > 0

    def get_report_rows(self, *, start: date, end: date, user_id: Optional[int] = None) -> Sequence[AttendanceReportRow]:
        clauses = ["a.attendance_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if user_id is not None:
            clauses.append("u.id=%s")
            params.append(int(user_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT u.id AS user_id, u.employee_code, u.full_name, u.department,
                       a.attendance_date, a.clock_in, a.clock_out,
                       a.paid_break_minutes, a.unpaid_break_minutes, a.status, a.notes
                FROM attendance_logs a
                JOIN users u ON u.id = a.user_id
                WHERE {' AND '.join(clauses)}
                ORDER BY a.attendance_date DESC, u.employee_code ASC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    user_id=int(r["user_id"]),
                    employee_code=r["employee_code"],
                    full_name=r["full_name"],
                    department=r.get("department"),
                    attendance_date=normalize_mysql_date(r["attendance_date"]),
                    clock_in=r.get("clock_in"),
                    clock_out=r.get("clock_out"),
                    paid_break_minutes=int(r.get("paid_break_minutes") or 0),
                    unpaid_break_minutes=int(r.get("unpaid_break_minutes") or 0),
                    status=AttendanceStatus(r["status"]),
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]


class MySQLWeeklyLateRepository(WeeklyLateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int, week_start: date) -> Optional[WeeklyLateRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, week_start_date, week_end_date, late_dates
                FROM weekly_late_tracking
                WHERE user_id=%s AND week_start_date=%s
                """,
                (int(user_id), week_start),
            )
            r = fetchone(cur)
            if not r:
                return None
            return WeeklyLateRecord(
                user_id=int(r["user_id"]),
                week_start=normalize_mysql_date(r["week_start_date"]),
                week_end=normalize_mysql_date(r["week_end_date"]),
                late_dates=load_dates(r.get("late_dates")),
            )

    def upsert(self, record: WeeklyLateRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO weekly_late_tracking(user_id, week_start_date, week_end_date, late_dates)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE late_dates=VALUES(late_dates)
                """,
                (int(record.user_id), record.week_start, record.week_end, dump_dates(record.late_dates)),
            )
