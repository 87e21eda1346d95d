from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor); commit on success, rollback on any error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values.

    mysql-connector may return TIME as datetime.time, datetime.timedelta or a
    'HH:MM[:SS]' string depending on the connector implementation.
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(hour=seconds // 3600, minute=(seconds % 3600) // 60, second=seconds % 60)
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(int(parts[0]), int(parts[1]), int(parts[2]) if len(parts) > 2 and parts[2] else 0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def normalize_mysql_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def dump_dates(values: Iterable[date]) -> str:
    """Serialize a list of dates into the JSON text column format."""
    return json.dumps([d.strftime("%Y-%m-%d") for d in values])


def load_dates(raw: Any) -> tuple[date, ...]:
    if not raw:
        return ()
    items = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
    return tuple(sorted({normalize_mysql_date(v) for v in items}))


def in_clause(values: Iterable[Any]) -> tuple[str, list[Any]]:
    """Build an `IN (%s, ...)` fragment with its params."""
    params = list(values)
    if not params:
        return "(NULL)", []
    return "(" + ",".join(["%s"] * len(params)) + ")", params
