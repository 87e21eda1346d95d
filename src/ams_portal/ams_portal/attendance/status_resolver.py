"""Single place that decides what a calendar day means for an employee.

Priority: holiday > approved leave > Sunday > policy Saturday off >
attendance log > absent (past) > N/A (today or future).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from ..core.constants import FULL_DAY_HOURS
from ..core.enums import AttendanceStatus, LeaveRequestType, RequestStatus, SaturdayPolicy
from ..leaves.model import LeaveRequest
from ..workdays.model import Holiday
from ..workdays.policy import SUNDAY, is_saturday_off
from .model import AttendanceLog


@dataclass(frozen=True)
class DayStatus:
    date: date
    status: str
    is_on_leave: bool = False
    holiday: Optional[Holiday] = None
    leave: Optional[LeaveRequest] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "status": self.status,
            "isOnLeave": self.is_on_leave,
            "holiday": self.holiday.name if self.holiday else None,
            "leaveId": self.leave.request_id if self.leave else None,
        }


def _leave_label(leave: LeaveRequest) -> str:
    if leave.request_type == LeaveRequestType.COMPENSATORY:
        return "Comp Off"
    if leave.request_type == LeaveRequestType.SWAP:
        return "Swap Leave"
    return f"Leave - {leave.request_type.value} ({leave.leave_type.value})"


def _present_label(log: AttendanceLog) -> str:
    if log.clock_out is not None:
        worked = log.worked_hours()
        if worked >= FULL_DAY_HOURS:
            return "Present"
        if worked > 0:
            return "Half Day"
    if log.status == AttendanceStatus.HALF_DAY or log.is_half_day:
        return "Half-day"
    if log.status == AttendanceStatus.LATE:
        return "Late"
    return "Present"


def resolve_day_status(
    day: date,
    *,
    today: date,
    log: Optional[AttendanceLog] = None,
    saturday_policy: Union[SaturdayPolicy, str, None] = SaturdayPolicy.ALL_WORKING,
    holidays: Iterable[Holiday] = (),
    approved_leaves: Iterable[LeaveRequest] = (),
) -> DayStatus:
    holiday = next((h for h in holidays if h.date == day and not h.is_tentative), None)
    if holiday is not None:
        return DayStatus(day, f"Holiday - {holiday.name}", holiday=holiday)

    leave = next(
        (l for l in approved_leaves if l.status == RequestStatus.APPROVED and l.covers(day)),
        None,
    )
    if leave is not None:
        return DayStatus(day, _leave_label(leave), is_on_leave=True, leave=leave)

    if day.weekday() == SUNDAY:
        return DayStatus(day, "Weekend")
    if is_saturday_off(day, saturday_policy):
        return DayStatus(day, "Week Off")

    if log is not None and log.clock_in is not None:
        return DayStatus(day, _present_label(log))

    if day < today:
        return DayStatus(day, "Absent")
    return DayStatus(day, "N/A")
