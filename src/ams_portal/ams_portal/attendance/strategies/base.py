from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus, HalfDaySource


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    is_late: bool = False
    is_half_day: bool = False
    half_day_source: Optional[HalfDaySource] = None
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: decide the clock-in status from lateness."""

    @abstractmethod
    def decide_checkin(self, *, late_minutes: int, grace_minutes: int) -> StatusDecision:
        raise NotImplementedError
