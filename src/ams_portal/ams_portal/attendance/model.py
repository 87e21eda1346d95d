from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AdminOverride, AttendanceStatus, HalfDaySource


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one employee's attendance for one IST date."""

    log_id: int
    user_id: int
    attendance_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime] = None
    paid_break_minutes: int = 0
    unpaid_break_minutes: int = 0
    break_started_at: Optional[datetime] = None
    break_is_paid: Optional[bool] = None
    status: AttendanceStatus = AttendanceStatus.ON_TIME
    is_late: bool = False
    late_minutes: int = 0
    is_half_day: bool = False
    half_day_reason: Optional[str] = None
    half_day_source: Optional[HalfDaySource] = None
    admin_override: AdminOverride = AdminOverride.NONE
    override_by: Optional[int] = None
    override_at: Optional[datetime] = None
    override_reason: Optional[str] = None
    notes: Optional[str] = None

    @property
    def on_break(self) -> bool:
        return self.break_started_at is not None

    @property
    def break_minutes(self) -> int:
        return int(self.paid_break_minutes) + int(self.unpaid_break_minutes)

    def worked_minutes(self, now: Optional[datetime] = None) -> int:
        """Minutes between clock-in and clock-out (or now), net of breaks."""
        if self.clock_in is None:
            return 0
        end = self.clock_out or now
        if end is None:
            return 0
        minutes = int((end - self.clock_in).total_seconds() // 60) - self.break_minutes
        return max(minutes, 0)

    def worked_hours(self, now: Optional[datetime] = None) -> float:
        return self.worked_minutes(now) / 60

    def to_dict(self) -> dict:
        return {
            "id": self.log_id,
            "userId": self.user_id,
            "attendanceDate": self.attendance_date.isoformat(),
            "clockIn": self.clock_in.isoformat() if self.clock_in else None,
            "clockOut": self.clock_out.isoformat() if self.clock_out else None,
            "paidBreakMinutes": self.paid_break_minutes,
            "unpaidBreakMinutes": self.unpaid_break_minutes,
            "onBreak": self.on_break,
            "status": self.status.value,
            "isLate": self.is_late,
            "lateMinutes": self.late_minutes,
            "isHalfDay": self.is_half_day,
            "halfDayReason": self.half_day_reason,
            "halfDaySource": self.half_day_source.value if self.half_day_source else None,
            "adminOverride": self.admin_override.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports and exports."""

    user_id: int
    employee_code: str
    full_name: str
    department: Optional[str]
    attendance_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    paid_break_minutes: int
    unpaid_break_minutes: int
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class WeeklyLateRecord:
    user_id: int
    week_start: date
    week_end: date
    late_dates: tuple[date, ...] = ()

    @property
    def late_count(self) -> int:
        return len(self.late_dates)
