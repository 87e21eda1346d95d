from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.ams_portal.ams_portal.attendance.model import AttendanceLog, AttendanceReportRow, WeeklyLateRecord
from src.ams_portal.ams_portal.core.enums import EmploymentStatus, RequestStatus, Role, SaturdayPolicy
from src.ams_portal.ams_portal.leaves.model import LeaveRequest
from src.ams_portal.ams_portal.notifications.model import RECIPIENT_ADMIN, Notification
from src.ams_portal.ams_portal.shifts.model import Shift
from src.ams_portal.ams_portal.users.model import LeaveBalances, User
from src.ams_portal.ams_portal.workdays.model import Holiday

# Wednesday, 14 October 2026, 09:00 IST
FIXED_NOW = datetime(2026, 10, 14, 9, 0)


class InMemoryUsers:
    def __init__(self):
        self.by_id: dict[int, User] = {}
        self._id = 0

    def add(self, user: User) -> User:
        self._id = max(self._id, user.user_id)
        self.by_id[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.email == email), None)

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.employee_code == employee_code), None)

    def list_users(self, *, active_only: bool = True):
        return [u for u in self.by_id.values() if u.is_active or not active_only]

    def list_by_roles(self, roles):
        return [u for u in self.by_id.values() if u.role in roles and u.is_active]

    def create(self, user: User) -> int:
        self._id += 1
        self.by_id[self._id] = replace(user, user_id=self._id)
        return self._id

    def update(self, user: User) -> bool:
        if user.user_id not in self.by_id:
            return False
        self.by_id[user.user_id] = user
        return True

    def update_leave_balances(self, user_id: int, *, balances: LeaveBalances, entitlements=None) -> bool:
        user = self.by_id[user_id]
        self.by_id[user_id] = replace(
            user,
            leave_balances=balances,
            leave_entitlements=entitlements or user.leave_entitlements,
        )
        return True


class InMemoryAttendance:
    def __init__(self, users: InMemoryUsers):
        self.logs: dict[int, AttendanceLog] = {}
        self._users = users
        self._id = 0

    def get_by_id(self, log_id: int) -> Optional[AttendanceLog]:
        return self.logs.get(log_id)

    def get_for_user_and_date(self, user_id: int, attendance_date: date) -> Optional[AttendanceLog]:
        return next(
            (l for l in self.logs.values() if l.user_id == user_id and l.attendance_date == attendance_date),
            None,
        )

    def list_for_user(self, user_id: int, *, start: date, end: date):
        rows = [l for l in self.logs.values() if l.user_id == user_id and start <= l.attendance_date <= end]
        return sorted(rows, key=lambda l: l.attendance_date)

    def create(self, log: AttendanceLog) -> int:
        self._id += 1
        self.logs[self._id] = replace(log, log_id=self._id)
        return self._id

    def save(self, log: AttendanceLog) -> bool:
        self.logs[log.log_id] = log
        return True

    def get_report_rows(self, *, start: date, end: date, user_id: Optional[int] = None):
        rows = []
        for log in sorted(self.logs.values(), key=lambda l: (l.attendance_date, l.user_id)):
            if not start <= log.attendance_date <= end or (user_id and log.user_id != user_id):
                continue
            user = self._users.get_by_id(log.user_id)
            rows.append(
                AttendanceReportRow(
                    user_id=log.user_id,
                    employee_code=user.employee_code,
                    full_name=user.full_name,
                    department=user.department,
                    attendance_date=log.attendance_date,
                    clock_in=log.clock_in,
                    clock_out=log.clock_out,
                    paid_break_minutes=log.paid_break_minutes,
                    unpaid_break_minutes=log.unpaid_break_minutes,
                    status=log.status,
                    notes=log.notes,
                )
            )
        return rows


class InMemoryWeeklyLate:
    def __init__(self):
        self.records: dict[tuple[int, date], WeeklyLateRecord] = {}

    def get(self, user_id: int, week_start: date) -> Optional[WeeklyLateRecord]:
        return self.records.get((user_id, week_start))

    def upsert(self, record: WeeklyLateRecord) -> None:
        self.records[(record.user_id, record.week_start)] = record


class InMemoryLeaves:
    def __init__(self, users: Optional[InMemoryUsers] = None):
        self.requests: dict[int, LeaveRequest] = {}
        self._id = 0
        self._users = users

    def add(self, request: LeaveRequest) -> LeaveRequest:
        self._id += 1
        request = replace(request, request_id=self._id)
        self.requests[self._id] = request
        return request

    def create(self, request: LeaveRequest) -> int:
        return self.add(request).request_id

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        return self.requests.get(request_id)

    def list_requests(self, *, user_id=None, status=None, request_types=None, limit: int = 500):
        rows = [
            r
            for r in self.requests.values()
            if (user_id is None or r.user_id == user_id)
            and (status is None or r.status == status)
            and (request_types is None or r.request_type in request_types)
        ]
        return rows[:limit]

    def list_overlapping(self, *, start: date, end: date, user_id=None, statuses=(RequestStatus.APPROVED,)):
        return [
            r
            for r in self.requests.values()
            if (user_id is None or r.user_id == user_id)
            and r.status in statuses
            and any(start <= d <= end for d in r.leave_dates)
        ]

    def save(self, request: LeaveRequest) -> bool:
        self.requests[request.request_id] = request
        return True

    def delete(self, request_id: int) -> bool:
        return self.requests.pop(request_id, None) is not None

    def _guarded(self, request, expected_status, adjust, write) -> bool:
        stored = self.requests.get(request.request_id)
        if stored is None or stored.status != expected_status:
            return False
        balances = None
        if adjust is not None:
            user = self._users.get_by_id(request.user_id)
            balances = adjust(user.leave_balances, user.leave_entitlements)
        # request write first; a failure there leaves balances untouched
        write()
        if balances is not None:
            self._users.update_leave_balances(request.user_id, balances=balances)
        return True

    def save_with_balances(self, request: LeaveRequest, *, expected_status, adjust=None) -> bool:
        return self._guarded(request, expected_status, adjust, lambda: self.save(request))

    def delete_with_balances(self, request: LeaveRequest, *, expected_status, adjust=None) -> bool:
        return self._guarded(request, expected_status, adjust, lambda: self.delete(request.request_id))


class InMemoryHolidays:
    def __init__(self, holidays=()):
        self.items: dict[int, Holiday] = {h.holiday_id: h for h in holidays}

    def list_between(self, *, start: date, end: date, include_tentative: bool = True):
        return sorted(
            (h for h in self.items.values() if start <= h.date <= end and (include_tentative or not h.is_tentative)),
            key=lambda h: h.date,
        )

    def get_by_id(self, holiday_id: int):
        return self.items.get(holiday_id)

    def create(self, *, name: str, holiday_date: date, is_tentative: bool = False) -> int:
        holiday_id = max(self.items, default=0) + 1
        self.items[holiday_id] = Holiday(holiday_id, name, holiday_date, is_tentative)
        return holiday_id

    def delete(self, holiday_id: int) -> bool:
        return self.items.pop(holiday_id, None) is not None


class InMemoryShifts:
    def __init__(self, shifts=()):
        self.items: dict[int, Shift] = {s.shift_id: s for s in shifts}

    def list_all(self):
        return list(self.items.values())

    def get_by_id(self, shift_id: int):
        return self.items.get(shift_id)

    def create(self, shift: Shift) -> int:
        shift_id = max(self.items, default=0) + 1
        self.items[shift_id] = replace(shift, shift_id=shift_id)
        return shift_id

    def update(self, shift: Shift) -> bool:
        if shift.shift_id not in self.items:
            return False
        self.items[shift.shift_id] = shift
        return True


class InMemoryNotifications:
    def __init__(self):
        self.items: list[Notification] = []

    def create(self, notification: Notification) -> Notification:
        stored = replace(notification, notification_id=len(self.items) + 1, created_at=FIXED_NOW)
        self.items.append(stored)
        return stored

    def list_for_user(self, *, user_id: int, include_admin: bool, limit: int = 50):
        rows = [
            n
            for n in self.items
            if n.user_id == user_id or (include_admin and n.recipient_type == RECIPIENT_ADMIN)
        ]
        return list(reversed(rows))[:limit]

    def mark_read(self, *, notification_id: int, user_id: Optional[int]) -> bool:
        for i, n in enumerate(self.items):
            if n.notification_id == notification_id and (user_id is None or n.user_id == user_id):
                self.items[i] = replace(n, is_read=True)
                return True
        return False


class RecordingEmitter:
    def __init__(self):
        self.emitted: list[tuple[str, dict, str]] = []

    def emit(self, event, data=None, **kwargs):
        self.emitted.append((event, data, kwargs.get("to")))


def build_user(user_id: int = 1, **overrides) -> User:
    values = dict(
        user_id=user_id,
        employee_code=f"EMP{user_id:03d}",
        full_name=f"Employee {user_id}",
        email=f"emp{user_id}@example.com",
        password_hash=None,
        role=Role.EMPLOYEE,
        joining_date=date(2024, 1, 15),
        employment_status=EmploymentStatus.PERMANENT,
        saturday_policy=SaturdayPolicy.ALL_WORKING,
        shift_id=1,
    )
    values.update(overrides)
    return User(**values)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_user():
    return build_user


@pytest.fixture
def users_repo():
    return InMemoryUsers()


@pytest.fixture
def attendance_repo(users_repo):
    return InMemoryAttendance(users_repo)


@pytest.fixture
def weekly_late_repo():
    return InMemoryWeeklyLate()


@pytest.fixture
def leaves_repo(users_repo):
    return InMemoryLeaves(users_repo)


@pytest.fixture
def holidays_repo():
    return InMemoryHolidays()


@pytest.fixture
def general_shift() -> Shift:
    return Shift(shift_id=1, name="General", start_time=time(9, 0), end_time=time(18, 0))


@pytest.fixture
def shifts_repo(general_shift):
    return InMemoryShifts([general_shift])


@pytest.fixture
def notifications_repo():
    return InMemoryNotifications()


@pytest.fixture
def emitter():
    return RecordingEmitter()
