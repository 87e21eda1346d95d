from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import date_range, ist_naive, month_bounds, now_ist
from ..core.enums import ExcelLogType, LeaveDayType, RequestStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..leaves.repository import LeaveRepository
from ..notifications.service import NotificationService
from ..reports.excel_log import ExcelLogService
from ..shifts.model import Shift
from ..shifts.policy import break_summary
from ..shifts.repository import ShiftRepository
from ..users.model import User
from ..users.repository import UserRepository
from ..workdays.repository import HolidayRepository
from .factory import AttendanceStrategyFactory
from .half_day import HalfDayService, late_minutes
from .late_tracking import WeeklyLateTracker
from .model import AttendanceLog
from .repository import AttendanceRepository
from .status_resolver import DayStatus, resolve_day_status
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        shifts: ShiftRepository,
        *,
        half_day: HalfDayService,
        late_tracker: WeeklyLateTracker,
        leaves: Optional[LeaveRepository] = None,
        holidays: Optional[HolidayRepository] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        excel_log: Optional[ExcelLogService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._shifts = shifts
        self._half_day = half_day
        self._late_tracker = late_tracker
        self._leaves = leaves
        self._holidays = holidays
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._excel_log = excel_log
        self._notifications = notifications

    def _get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise NotFoundError("Employee not found")
        return user

    def _get_shift(self, user: User) -> Optional[Shift]:
        if not user.shift_id:
            return None
        return self._shifts.get_by_id(user.shift_id)

    def _has_half_day_leave(self, user_id: int, work_date: date) -> bool:
        if self._leaves is None:
            return False
        for leave in self._leaves.list_overlapping(start=work_date, end=work_date, user_id=user_id):
            if leave.covers(work_date) and leave.leave_type != LeaveDayType.FULL_DAY:
                return True
        return False

    def _checkin_decision(self, late: int) -> StatusDecision:
        grace = self._half_day.grace_minutes
        strategy = self._factory.for_checkin(late_minutes=late, grace_minutes=grace)
        return strategy.decide_checkin(late_minutes=late, grace_minutes=grace)

    def _open_log(self, user_id: int, today: date) -> AttendanceLog:
        log = self._attendance.get_for_user_and_date(user_id, today)
        if not log or log.clock_in is None:
            raise ValidationError("You have not clocked in today")
        if log.clock_out is not None:
            raise ValidationError("You have already clocked out today")
        return log

    def _record(self, user: User, log: AttendanceLog, event: ExcelLogType, details: str, at: datetime) -> None:
        if self._excel_log is None:
            return
        self._excel_log.upsert_attendance_row(user, log)
        self._excel_log.log_event(user, event, details, at=at)

    def clock_in(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceLog:
        now = ist_naive(now or now_ist())
        today = now.date()
        user = self._get_user(user_id)

        if self._attendance.get_for_user_and_date(user.user_id, today):
            raise ValidationError("You have already clocked in today")

        shift = self._get_shift(user)
        late = late_minutes(now, shift)
        decision = self._checkin_decision(late)

        log = AttendanceLog(
            log_id=0,
            user_id=user.user_id,
            attendance_date=today,
            clock_in=now,
            status=decision.status,
            is_late=decision.is_late,
            late_minutes=late,
            is_half_day=decision.is_half_day,
            half_day_source=decision.half_day_source,
            half_day_reason=decision.note if decision.is_half_day else None,
            notes=decision.note,
        )
        half = self._half_day.evaluate(
            log,
            shift=shift,
            has_half_day_leave=self._has_half_day_leave(user.user_id, today),
            checkin=decision,
        )
        log = self._half_day.apply(log, half)

        log_id = self._attendance.create(log)
        log = replace(log, log_id=log_id)
        logger.info("User %s clocked in at %s (%s)", user.user_id, now.isoformat(), log.status.value)

        if log.is_late:
            self._late_tracker.record_late(user.user_id, today)

        self._record(user, log, ExcelLogType.CLOCK_IN, f"Status: {log.status.value}", now)
        if self._notifications:
            self._notifications.notify_check_in(user)
            if log.is_half_day and half.reason:
                self._notifications.notify_half_day(user, today.isoformat(), half.reason)
        return log

    def clock_out(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceLog:
        now = ist_naive(now or now_ist())
        user = self._get_user(user_id)
        log = self._open_log(user.user_id, now.date())

        if log.on_break:
            log = self._close_break(log, now)
        log = replace(log, clock_out=now)

        was_half_day = log.is_half_day
        shift = self._get_shift(user)
        half = self._half_day.evaluate(
            log,
            shift=shift,
            has_half_day_leave=self._has_half_day_leave(user.user_id, log.attendance_date),
            checkin=self._checkin_decision(late_minutes(log.clock_in, shift)),
        )
        log = self._half_day.apply(log, half)
        self._attendance.save(log)
        logger.info("User %s clocked out after %.2fh (%s)", user.user_id, log.worked_hours(), log.status.value)

        self._record(user, log, ExcelLogType.CLOCK_OUT, f"Worked {log.worked_hours():.2f}h", now)
        if self._notifications:
            self._notifications.notify_check_out(user)
            if log.is_half_day and not was_half_day and half.reason:
                self._notifications.notify_half_day(user, log.attendance_date.isoformat(), half.reason)
        return log

    @staticmethod
    def _close_break(log: AttendanceLog, now: datetime) -> AttendanceLog:
        minutes = max(0, int((now - log.break_started_at).total_seconds() // 60))
        if log.break_is_paid:
            log = replace(log, paid_break_minutes=log.paid_break_minutes + minutes)
        else:
            log = replace(log, unpaid_break_minutes=log.unpaid_break_minutes + minutes)
        return replace(log, break_started_at=None, break_is_paid=None)

    def start_break(self, user_id: int, *, paid: bool, now: Optional[datetime] = None) -> AttendanceLog:
        now = ist_naive(now or now_ist())
        user = self._get_user(user_id)
        log = self._open_log(user.user_id, now.date())
        if log.on_break:
            raise ValidationError("A break is already in progress")

        log = replace(log, break_started_at=now, break_is_paid=bool(paid))
        self._attendance.save(log)

        kind = "paid" if paid else "unpaid"
        if self._excel_log:
            self._excel_log.log_event(user, ExcelLogType.BREAK_START, f"{kind} break", at=now)
        if self._notifications:
            self._notifications.notify_break(user, started=True, paid=bool(paid))
        return log

    def end_break(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceLog:
        now = ist_naive(now or now_ist())
        user = self._get_user(user_id)
        log = self._open_log(user.user_id, now.date())
        if not log.on_break:
            raise ValidationError("No break in progress")

        paid = bool(log.break_is_paid)
        log = self._close_break(log, now)
        self._attendance.save(log)

        kind = "paid" if paid else "unpaid"
        self._record(user, log, ExcelLogType.BREAK_END, f"{kind} break", now)
        if self._notifications:
            self._notifications.notify_break(user, started=False, paid=paid)
        return log

    def today(self, user_id: int, *, now: Optional[datetime] = None) -> dict:
        now = ist_naive(now or now_ist())
        user = self._get_user(user_id)
        log = self._attendance.get_for_user_and_date(user.user_id, now.date())

        payload: dict = {
            "attendance": log.to_dict() if log else None,
            "weeklyLate": self._late_tracker.weekly_stats(user.user_id, now.date()),
            "breaks": None,
            "workedHours": 0.0,
        }
        if log and log.clock_in:
            paid_taken, unpaid_taken = log.paid_break_minutes, log.unpaid_break_minutes
            if log.on_break:
                running = max(0, int((now - log.break_started_at).total_seconds() // 60))
                if log.break_is_paid:
                    paid_taken += running
                else:
                    unpaid_taken += running
            payload["breaks"] = break_summary(log.clock_in, paid_taken, unpaid_taken).to_dict()
            payload["workedHours"] = round(log.worked_hours(now), 2)
        return payload

    def history(self, user_id: int, *, start: date, end: date) -> Sequence[AttendanceLog]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._attendance.list_for_user(int(user_id), start=start, end=end)

    def monthly_calendar(self, user_id: int, year: int, month: int, *, now: Optional[datetime] = None) -> list[DayStatus]:
        today = ist_naive(now or now_ist()).date()
        user = self._get_user(user_id)
        start, end = month_bounds(int(year), int(month))

        logs = {log.attendance_date: log for log in self._attendance.list_for_user(user.user_id, start=start, end=end)}
        holidays = (
            self._holidays.list_between(start=start, end=end, include_tentative=False) if self._holidays else ()
        )
        leaves = (
            self._leaves.list_overlapping(start=start, end=end, user_id=user.user_id, statuses=(RequestStatus.APPROVED,))
            if self._leaves
            else ()
        )

        return [
            resolve_day_status(
                day,
                today=today,
                log=logs.get(day),
                saturday_policy=user.saturday_policy,
                holidays=holidays,
                approved_leaves=[l for l in leaves if not l.is_year_end],
            )
            for day in date_range(start, end)
        ]
