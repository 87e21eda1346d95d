from __future__ import annotations

from dataclasses import dataclass

from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the clock-in strategy from late minutes."""

    def for_checkin(self, *, late_minutes: int, grace_minutes: int) -> AttendanceStrategy:
        if late_minutes <= 0:
            return OnTimeStrategy()
        if late_minutes <= grace_minutes:
            return LateStrategy()
        return HalfDayStrategy()
