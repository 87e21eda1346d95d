from __future__ import annotations

from .base import PayrollCalculator
from ...attendance.model import AttendanceReportRow


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: (out - in) - unpaid break minutes, not below 0.

    Paid breaks count as worked time.
    """

    def worked_minutes(self, row: AttendanceReportRow) -> int:
        if not row.clock_in or not row.clock_out:
            return 0
        minutes = int((row.clock_out - row.clock_in).total_seconds() // 60)
        minutes -= int(row.unpaid_break_minutes or 0)
        return max(minutes, 0)
