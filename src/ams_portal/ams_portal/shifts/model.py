from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.constants import FULL_DAY_HOURS, PAID_BREAK_ALLOWANCE_MINUTES
from ..core.enums import ShiftType


@dataclass(frozen=True)
class Shift:
    """Domain entity: work shift assigned to employees."""

    shift_id: int
    name: str
    shift_type: ShiftType = ShiftType.FIXED
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    duration_hours: Optional[float] = None
    paid_break_minutes: int = PAID_BREAK_ALLOWANCE_MINUTES

    def start_on(self, work_date: date) -> Optional[datetime]:
        if self.start_time is None:
            return None
        return datetime.combine(work_date, self.start_time)

    def to_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "name": self.name,
            "shiftType": self.shift_type.value,
            "startTime": self.start_time.strftime("%H:%M") if self.start_time else None,
            "endTime": self.end_time.strftime("%H:%M") if self.end_time else None,
            "durationHours": shift_duration_hours(self),
            "paidBreakMinutes": self.paid_break_minutes,
        }


def shift_duration_hours(shift: Shift) -> float:
    """Fixed shifts derive the span from start/end (overnight adds a day)."""
    if shift.shift_type == ShiftType.FIXED and shift.start_time and shift.end_time:
        start = timedelta(hours=shift.start_time.hour, minutes=shift.start_time.minute)
        end = timedelta(hours=shift.end_time.hour, minutes=shift.end_time.minute)
        if end <= start:
            end += timedelta(hours=24)
        return round((end - start).total_seconds() / 3600, 2)
    return float(shift.duration_hours or FULL_DAY_HOURS)
