from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AuthMethod, EmploymentStatus, Role, SaturdayPolicy
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_date
from .model import LeaveBalances, User
from .repository import UserRepository

_COLUMNS = """
    id, employee_code, full_name, email, password_hash, role, auth_method,
    department, designation, joining_date, saturday_policy, employment_status,
    probation_end_date, shift_id, profile_image_url, is_active,
    sick_balance, casual_balance, paid_balance,
    sick_entitlement, casual_entitlement, paid_entitlement
"""


def _row_to_user(r: dict) -> User:
    return User(
        user_id=int(r["id"]),
        employee_code=r["employee_code"],
        full_name=r["full_name"],
        email=r["email"],
        password_hash=r.get("password_hash"),
        role=Role(r["role"]),
        auth_method=AuthMethod(r.get("auth_method") or AuthMethod.LOCAL.value),
        department=r.get("department"),
        designation=r.get("designation"),
        joining_date=normalize_mysql_date(r["joining_date"]),
        saturday_policy=SaturdayPolicy(r.get("saturday_policy") or SaturdayPolicy.ALL_WORKING.value),
        employment_status=EmploymentStatus(r.get("employment_status") or EmploymentStatus.PROBATION.value),
        probation_end_date=normalize_mysql_date(r.get("probation_end_date")),
        shift_id=r.get("shift_id"),
        profile_image_url=r.get("profile_image_url"),
        is_active=bool(r.get("is_active", True)),
        leave_balances=LeaveBalances(
            sick=float(r["sick_balance"]),
            casual=float(r["casual_balance"]),
            paid=float(r["paid_balance"]),
        ),
        leave_entitlements=LeaveBalances(
            sick=float(r["sick_entitlement"]),
            casual=float(r["casual_entitlement"]),
            paid=float(r["paid_entitlement"]),
        ),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("id", int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email", email.strip().lower())

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        return self._get_one("employee_code", employee_code.strip())

    def list_users(self, *, active_only: bool = True) -> Sequence[User]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users {where} ORDER BY employee_code")
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_by_roles(self, roles: Sequence[Role]) -> Sequence[User]:
        fragment, params = in_clause(r.value for r in roles)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE is_active=1 AND role IN {fragment}", tuple(params))
            return [_row_to_user(r) for r in fetchall(cur)]

    def create(self, user: User) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(
                    employee_code, full_name, email, password_hash, role, auth_method,
                    department, designation, joining_date, saturday_policy, employment_status,
                    probation_end_date, shift_id, profile_image_url, is_active,
                    sick_balance, casual_balance, paid_balance,
                    sick_entitlement, casual_entitlement, paid_entitlement
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.employee_code,
                    user.full_name,
                    user.email,
                    user.password_hash,
                    user.role.value,
                    user.auth_method.value,
                    user.department,
                    user.designation,
                    user.joining_date,
                    user.saturday_policy.value,
                    user.employment_status.value,
                    user.probation_end_date,
                    user.shift_id,
                    user.profile_image_url,
                    int(user.is_active),
                    user.leave_balances.sick,
                    user.leave_balances.casual,
                    user.leave_balances.paid,
                    user.leave_entitlements.sick,
                    user.leave_entitlements.casual,
                    user.leave_entitlements.paid,
                ),
            )
            return int(cur.lastrowid)

    def update(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET full_name=%s, email=%s, password_hash=%s, role=%s, auth_method=%s,
                    department=%s, designation=%s, joining_date=%s, saturday_policy=%s,
                    employment_status=%s, probation_end_date=%s, shift_id=%s,
                    profile_image_url=%s, is_active=%s
                WHERE id=%s
                """,
                (
                    user.full_name,
                    user.email,
                    user.password_hash,
                    user.role.value,
                    user.auth_method.value,
                    user.department,
                    user.designation,
                    user.joining_date,
                    user.saturday_policy.value,
                    user.employment_status.value,
                    user.probation_end_date,
                    user.shift_id,
                    user.profile_image_url,
                    int(user.is_active),
                    int(user.user_id),
                ),
            )
            return cur.rowcount > 0

    def update_leave_balances(
        self,
        user_id: int,
        *,
        balances: LeaveBalances,
        entitlements: Optional[LeaveBalances] = None,
    ) -> bool:
        sets = ["sick_balance=%s", "casual_balance=%s", "paid_balance=%s"]
        params: list[object] = [balances.sick, balances.casual, balances.paid]
        if entitlements is not None:
            sets += ["sick_entitlement=%s", "casual_entitlement=%s", "paid_entitlement=%s"]
            params += [entitlements.sick, entitlements.casual, entitlements.paid]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {', '.join(sets)} WHERE id=%s",
                tuple(params + [int(user_id)]),
            )
            return cur.rowcount > 0
