from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import AttendanceReportRow
from ...core.constants import FULL_DAY_HOURS


class PayrollCalculator(ABC):
    """Turns one attendance report row into payable minutes.

    Subclasses decide how breaks count; the full-day shortfall is shared.
    """

    full_day_minutes: int = int(FULL_DAY_HOURS * 60)

    @abstractmethod
    def worked_minutes(self, row: AttendanceReportRow) -> int:
        raise NotImplementedError

    def shortfall_minutes(self, row: AttendanceReportRow) -> int:
        # open days have no shortfall until clock-out
        if not row.clock_out:
            return 0
        return max(self.full_day_minutes - self.worked_minutes(row), 0)
