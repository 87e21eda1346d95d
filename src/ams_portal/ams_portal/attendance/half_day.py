"""Half-day determination and the admin half-day override.

Priority: admin override > approved half-day leave > late beyond grace >
worked hours below the full-day threshold (only once clocked out).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import ist_naive, now_ist
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_GRACE_MINUTES, FULL_DAY_HOURS
from ..core.enums import MANAGER_ROLES, AdminOverride, AttendanceStatus, ExcelLogType, HalfDaySource
from ..core.exceptions import AuthorizationError, NotFoundError
from ..notifications.service import NotificationService
from ..reports.excel_log import ExcelLogService
from ..shifts.model import Shift
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceLog
from .repository import AttendanceRepository
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HalfDayDecision:
    is_half_day: bool
    source: Optional[HalfDaySource]
    reason: Optional[str]
    late_minutes: int
    is_late: bool = False

    def status(self) -> AttendanceStatus:
        if self.is_half_day:
            return AttendanceStatus.HALF_DAY
        return AttendanceStatus.LATE if self.is_late else AttendanceStatus.ON_TIME


def late_minutes(clock_in: Optional[datetime], shift: Optional[Shift]) -> int:
    if clock_in is None or shift is None or shift.start_time is None:
        return 0
    shift_start = datetime.combine(clock_in.date(), shift.start_time)
    return max(0, math.floor((clock_in - shift_start).total_seconds() / 60))


class HalfDayService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        excel_log: Optional[ExcelLogService] = None,
        notifications: Optional[NotificationService] = None,
        grace_minutes: int = DEFAULT_GRACE_MINUTES,
        full_day_hours: float = FULL_DAY_HOURS,
    ):
        self._attendance = attendance
        self._users = users
        self._excel_log = excel_log
        self._notifications = notifications
        self._grace_minutes = int(grace_minutes)
        self._full_day_hours = float(full_day_hours)

    @property
    def grace_minutes(self) -> int:
        return self._grace_minutes

    def evaluate(
        self,
        log: AttendanceLog,
        *,
        shift: Optional[Shift],
        has_half_day_leave: bool,
        checkin: Optional[StatusDecision] = None,
    ) -> HalfDayDecision:
        """Decide half-day state for a log.

        ``checkin`` is the clock-in strategy's decision; when given it owns the
        lateness outcome, otherwise lateness is measured against the grace period.
        """
        late = late_minutes(log.clock_in, shift)
        if checkin is not None:
            is_late = checkin.is_late
            late_half_day = checkin.is_half_day
            late_reason = checkin.note
        else:
            is_late = late > 0
            late_half_day = late > self._grace_minutes
            late_reason = f"Late by {late} min (grace {self._grace_minutes} min)"
        if log.admin_override == AdminOverride.OVERRIDE_LATE:
            late, is_late, late_half_day = 0, False, False

        if log.admin_override == AdminOverride.OVERRIDE_HALF_DAY:
            return HalfDayDecision(False, None, log.override_reason or "Half day removed by admin", late, is_late)
        if log.is_half_day and log.half_day_source == HalfDaySource.ADMIN:
            return HalfDayDecision(True, HalfDaySource.ADMIN, log.half_day_reason, late, is_late)

        if has_half_day_leave:
            return HalfDayDecision(True, HalfDaySource.LEAVE, "Approved half-day leave", late, is_late)

        if late_half_day:
            source = (checkin.half_day_source if checkin else None) or HalfDaySource.LATE
            return HalfDayDecision(True, source, late_reason, late, is_late)

        if log.clock_out is not None:
            worked = log.worked_hours()
            if 0 < worked < self._full_day_hours:
                return HalfDayDecision(
                    True,
                    HalfDaySource.HOURS,
                    f"Worked {worked:.2f}h (< {self._full_day_hours}h)",
                    late,
                    is_late,
                )

        return HalfDayDecision(False, None, None, late, is_late)

    def apply(self, log: AttendanceLog, decision: HalfDayDecision) -> AttendanceLog:
        return replace(
            log,
            status=decision.status(),
            is_late=decision.is_late,
            late_minutes=decision.late_minutes,
            is_half_day=decision.is_half_day,
            half_day_source=decision.source,
            half_day_reason=decision.reason if decision.is_half_day else None,
        )

    def _load(self, admin: User, log_id: int) -> tuple[AttendanceLog, User]:
        if admin.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can change half-day status")
        log = self._attendance.get_by_id(int(log_id))
        if not log:
            raise NotFoundError("Attendance record not found")
        employee = self._users.get_by_id(log.user_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return log, employee

    def mark_half_day(self, admin: User, log_id: int, reason: str, *, now: Optional[datetime] = None) -> AttendanceLog:
        log, employee = self._load(admin, log_id)
        reason = require_non_empty(reason, "Reason")
        now = ist_naive(now or now_ist())

        updated = replace(
            log,
            status=AttendanceStatus.HALF_DAY,
            is_half_day=True,
            half_day_source=HalfDaySource.ADMIN,
            half_day_reason=reason,
            admin_override=AdminOverride.NONE,
            override_by=admin.user_id,
            override_at=now,
            override_reason=reason,
        )
        self._attendance.save(updated)
        logger.info("Admin %s marked log %s as half day", admin.user_id, log.log_id)

        if self._excel_log:
            self._excel_log.upsert_attendance_row(employee, updated)
            self._excel_log.log_event(
                employee,
                ExcelLogType.MARK_HALF_DAY,
                f"{log.attendance_date.isoformat()} by {admin.full_name}: {reason}",
                at=now,
            )
        if self._notifications:
            self._notifications.notify_half_day(employee, log.attendance_date.isoformat(), reason, marked=True)
        return updated

    def unmark_half_day(self, admin: User, log_id: int, reason: str = "", *, now: Optional[datetime] = None) -> AttendanceLog:
        log, employee = self._load(admin, log_id)
        now = ist_naive(now or now_ist())
        reason = (reason or "").strip() or "Half day removed by admin"

        updated = replace(
            log,
            status=AttendanceStatus.LATE if log.is_late else AttendanceStatus.ON_TIME,
            is_half_day=False,
            half_day_source=None,
            half_day_reason=None,
            admin_override=AdminOverride.OVERRIDE_HALF_DAY,
            override_by=admin.user_id,
            override_at=now,
            override_reason=reason,
        )
        self._attendance.save(updated)
        logger.info("Admin %s removed half day from log %s", admin.user_id, log.log_id)

        if self._excel_log:
            self._excel_log.upsert_attendance_row(employee, updated)
            self._excel_log.log_event(
                employee,
                ExcelLogType.UNMARK_HALF_DAY,
                f"{log.attendance_date.isoformat()} by {admin.full_name}: {reason}",
                at=now,
            )
        if self._notifications:
            self._notifications.notify_half_day(employee, log.attendance_date.isoformat(), reason, marked=False)
        return updated
