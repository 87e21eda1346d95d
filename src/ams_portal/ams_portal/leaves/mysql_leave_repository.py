from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import (
    HalfYearPeriod,
    LeaveBalanceKind,
    LeaveDayType,
    LeaveRequestType,
    RequestStatus,
    YearEndAction,
)
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_dates, fetchall, fetchone, in_clause, load_dates, normalize_mysql_date
from ..users.model import LeaveBalances
from .model import LeaveRequest
from .repository import BalanceAdjustment, LeaveRepository

_COLUMNS = """
    id, user_id, request_type, leave_type, leave_dates, alternate_date, reason, status,
    medical_certificate, is_backdated, applied_after_return, half_year_period,
    approved_by, approved_at, rejection_notes,
    year_end_action, year_end_leave_type, year_end_days, year_end_year, is_processed, created_at
"""


def _opt(enum_cls, value):
    return enum_cls(value) if value else None


def _row_to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["id"]),
        user_id=int(r["user_id"]),
        request_type=LeaveRequestType(r["request_type"]),
        leave_type=LeaveDayType(r.get("leave_type") or LeaveDayType.FULL_DAY.value),
        leave_dates=load_dates(r.get("leave_dates")),
        alternate_date=normalize_mysql_date(r.get("alternate_date")),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        medical_certificate=r.get("medical_certificate"),
        is_backdated=bool(r.get("is_backdated")),
        applied_after_return=bool(r.get("applied_after_return")),
        half_year_period=_opt(HalfYearPeriod, r.get("half_year_period")),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        rejection_notes=r.get("rejection_notes"),
        year_end_action=_opt(YearEndAction, r.get("year_end_action")),
        year_end_leave_type=_opt(LeaveBalanceKind, r.get("year_end_leave_type")),
        year_end_days=float(r["year_end_days"]) if r.get("year_end_days") is not None else None,
        year_end_year=r.get("year_end_year"),
        is_processed=bool(r.get("is_processed")),
        created_at=r.get("created_at"),
    )


def _update_request(cur, request: LeaveRequest) -> bool:
    cur.execute(
        """
        UPDATE leave_requests
        SET status=%s, approved_by=%s, approved_at=%s, rejection_notes=%s,
            medical_certificate=%s, is_processed=%s
        WHERE id=%s
        """,
        (
            request.status.value,
            request.approved_by,
            request.approved_at,
            request.rejection_notes,
            request.medical_certificate,
            int(request.is_processed),
            int(request.request_id),
        ),
    )
    return cur.rowcount > 0


def _lock_with_status(cur, request_id: int, expected_status: RequestStatus) -> bool:
    cur.execute("SELECT status FROM leave_requests WHERE id=%s FOR UPDATE", (int(request_id),))
    row = fetchone(cur)
    return bool(row) and row["status"] == expected_status.value


def _adjust_balances(cur, user_id: int, adjust: BalanceAdjustment) -> None:
    cur.execute(
        """
        SELECT sick_balance, casual_balance, paid_balance,
               sick_entitlement, casual_entitlement, paid_entitlement
        FROM users WHERE id=%s FOR UPDATE
        """,
        (int(user_id),),
    )
    r = fetchone(cur)
    if not r:
        raise NotFoundError("Employee not found")
    balances = LeaveBalances(float(r["sick_balance"]), float(r["casual_balance"]), float(r["paid_balance"]))
    entitlements = LeaveBalances(
        float(r["sick_entitlement"]), float(r["casual_entitlement"]), float(r["paid_entitlement"])
    )
    updated = adjust(balances, entitlements)
    if updated != balances:
        cur.execute(
            "UPDATE users SET sick_balance=%s, casual_balance=%s, paid_balance=%s WHERE id=%s",
            (updated.sick, updated.casual, updated.paid, int(user_id)),
        )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, request: LeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    user_id, request_type, leave_type, leave_dates, start_date, end_date,
                    alternate_date, reason, status, medical_certificate, is_backdated,
                    applied_after_return, half_year_period,
                    year_end_action, year_end_leave_type, year_end_days, year_end_year
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(request.user_id),
                    request.request_type.value,
                    request.leave_type.value,
                    dump_dates(request.leave_dates),
                    request.start_date,
                    request.end_date,
                    request.alternate_date,
                    request.reason,
                    request.status.value,
                    request.medical_certificate,
                    int(request.is_backdated),
                    int(request.applied_after_return),
                    request.half_year_period.value if request.half_year_period else None,
                    request.year_end_action.value if request.year_end_action else None,
                    request.year_end_leave_type.value if request.year_end_leave_type else None,
                    request.year_end_days,
                    request.year_end_year,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        request_types: Optional[Sequence[LeaveRequestType]] = None,
        limit: int = 500,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if request_types:
            fragment, values = in_clause(t.value for t in request_types)
            clauses.append(f"request_type IN {fragment}")
            params.extend(values)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_overlapping(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
        statuses: Sequence[RequestStatus] = (RequestStatus.APPROVED,),
    ) -> Sequence[LeaveRequest]:
        fragment, values = in_clause(s.value for s in statuses)
        clauses = ["start_date <= %s", "end_date >= %s", f"status IN {fragment}"]
        params: list[object] = [end, start, *values]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {' AND '.join(clauses)} ORDER BY start_date",
                tuple(params),
            )
            rows = [_row_to_request(r) for r in fetchall(cur)]
        # range columns only bound the search; the date list is authoritative
        return [r for r in rows if any(start <= d <= end for d in r.leave_dates)]

    def save(self, request: LeaveRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _update_request(cur, request)

    def save_with_balances(
        self,
        request: LeaveRequest,
        *,
        expected_status: RequestStatus,
        adjust: Optional[BalanceAdjustment] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _lock_with_status(cur, request.request_id, expected_status):
                return False
            _update_request(cur, request)
            if adjust is not None:
                _adjust_balances(cur, request.user_id, adjust)
            return True

    def delete(self, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leave_requests WHERE id=%s", (int(request_id),))
            return cur.rowcount > 0

    def delete_with_balances(
        self,
        request: LeaveRequest,
        *,
        expected_status: RequestStatus,
        adjust: Optional[BalanceAdjustment] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _lock_with_status(cur, request.request_id, expected_status):
                return False
            cur.execute("DELETE FROM leave_requests WHERE id=%s", (int(request.request_id),))
            if adjust is not None:
                _adjust_balances(cur, request.user_id, adjust)
            return True
