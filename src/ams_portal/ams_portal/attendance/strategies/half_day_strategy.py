from __future__ import annotations

from ...core.enums import AttendanceStatus, HalfDaySource
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Late beyond the grace period counts as a half day."""

    def decide_checkin(self, *, late_minutes: int, grace_minutes: int) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY,
            is_late=True,
            is_half_day=True,
            half_day_source=HalfDaySource.LATE,
            note=f"Late by {late_minutes} min (grace {grace_minutes} min)",
        )
