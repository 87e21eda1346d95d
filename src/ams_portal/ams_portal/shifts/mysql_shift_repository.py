from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Shift
from .repository import ShiftRepository


def _row_to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["id"]),
        name=r["name"],
        shift_type=ShiftType(r.get("shift_type") or ShiftType.FIXED.value),
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        duration_hours=float(r["duration_hours"]) if r.get("duration_hours") is not None else None,
        paid_break_minutes=int(r.get("paid_break_minutes") or 0),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, shift_type, start_time, end_time, duration_hours, paid_break_minutes
                FROM shifts
                WHERE is_active=1
                ORDER BY id
                """
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, shift_type, start_time, end_time, duration_hours, paid_break_minutes
                FROM shifts
                WHERE id=%s
                """,
                (int(shift_id),),
            )
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def create(self, shift: Shift) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(name, shift_type, start_time, end_time, duration_hours, paid_break_minutes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    shift.name,
                    shift.shift_type.value,
                    shift.start_time,
                    shift.end_time,
                    shift.duration_hours,
                    int(shift.paid_break_minutes),
                ),
            )
            return int(cur.lastrowid)

    def update(self, shift: Shift) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET name=%s, shift_type=%s, start_time=%s, end_time=%s, duration_hours=%s, paid_break_minutes=%s
                WHERE id=%s
                """,
                (
                    shift.name,
                    shift.shift_type.value,
                    shift.start_time,
                    shift.end_time,
                    shift.duration_hours,
                    int(shift.paid_break_minutes),
                    int(shift.shift_id),
                ),
            )
            return cur.rowcount > 0
