from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late, but within the grace period."""

    def decide_checkin(self, *, late_minutes: int, grace_minutes: int) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            is_late=True,
            note=f"Late by {late_minutes} min",
        )
