from __future__ import annotations

from datetime import datetime, time
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import Role, ShiftType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Shift
from .repository import ShiftRepository


def _parse_time(value: Optional[str], field_name: str) -> Optional[time]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")


def _build_shift(
    shift_id: int,
    *,
    name: str,
    shift_type: str,
    start_time: Optional[str],
    end_time: Optional[str],
    duration_hours: Optional[float],
    paid_break_minutes: int,
) -> Shift:
    name = require_non_empty(name, "Shift name")
    try:
        kind = ShiftType(shift_type)
    except ValueError:
        raise ValidationError("Shift type must be Fixed or Flexible")

    start = _parse_time(start_time, "Start time")
    end = _parse_time(end_time, "End time")
    if kind == ShiftType.FIXED and (start is None or end is None):
        raise ValidationError("Fixed shifts need a start and end time")
    if kind == ShiftType.FLEXIBLE and not duration_hours:
        raise ValidationError("Flexible shifts need a duration")

    return Shift(
        shift_id=int(shift_id),
        name=name,
        shift_type=kind,
        start_time=start,
        end_time=end,
        duration_hours=float(duration_hours) if duration_hours else None,
        paid_break_minutes=int(paid_break_minutes),
    )


class ShiftService:
    def __init__(self, shifts: ShiftRepository):
        self._shifts = shifts

    def list_all(self) -> Sequence[Shift]:
        return self._shifts.list_all()

    def get(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def create(
        self,
        *,
        current_role: Role,
        name: str,
        shift_type: str = ShiftType.FIXED.value,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        duration_hours: Optional[float] = None,
        paid_break_minutes: int = 30,
    ) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only an Admin can manage shifts")
        return self._shifts.create(
            _build_shift(
                0,
                name=name,
                shift_type=shift_type,
                start_time=start_time,
                end_time=end_time,
                duration_hours=duration_hours,
                paid_break_minutes=paid_break_minutes,
            )
        )

    def update(
        self,
        *,
        current_role: Role,
        shift_id: int,
        name: str,
        shift_type: str = ShiftType.FIXED.value,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        duration_hours: Optional[float] = None,
        paid_break_minutes: int = 30,
    ) -> Shift:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only an Admin can manage shifts")
        self.get(shift_id)
        shift = _build_shift(
            shift_id,
            name=name,
            shift_type=shift_type,
            start_time=start_time,
            end_time=end_time,
            duration_hours=duration_hours,
            paid_break_minutes=paid_break_minutes,
        )
        self._shifts.update(shift)
        return shift
