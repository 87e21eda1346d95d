from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Holiday
from .repository import HolidayRepository


def _row_to_holiday(r: dict) -> Holiday:
    return Holiday(
        holiday_id=int(r["id"]),
        name=r["name"],
        date=normalize_mysql_date(r["holiday_date"]),
        is_tentative=bool(r.get("is_tentative")),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_between(self, *, start: date, end: date, include_tentative: bool = True) -> Sequence[Holiday]:
        clauses = ["holiday_date BETWEEN %s AND %s"]
        if not include_tentative:
            clauses.append("is_tentative=0")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, name, holiday_date, is_tentative
                FROM holidays
                WHERE {' AND '.join(clauses)}
                ORDER BY holiday_date
                """,
                (start, end),
            )
            return [_row_to_holiday(r) for r in fetchall(cur)]

    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, holiday_date, is_tentative FROM holidays WHERE id=%s", (int(holiday_id),))
            r = fetchone(cur)
            return _row_to_holiday(r) if r else None

    def create(self, *, name: str, holiday_date: date, is_tentative: bool = False) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO holidays(name, holiday_date, is_tentative) VALUES(%s,%s,%s)",
                (name, holiday_date, int(bool(is_tentative))),
            )
            return int(cur.lastrowid)

    def delete(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE id=%s", (int(holiday_id),))
            return cur.rowcount > 0
