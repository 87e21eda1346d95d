"""Break allowance and required logout time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.constants import PAID_BREAK_ALLOWANCE_MINUTES, TOTAL_SHIFT_MINUTES


@dataclass(frozen=True)
class BreakSummary:
    paid_break_allowance: int
    paid_taken: int
    extra_paid: int
    unpaid: int
    required_logout: datetime

    def to_dict(self) -> dict:
        return {
            "paidBreakAllowance": self.paid_break_allowance,
            "paidTaken": self.paid_taken,
            "extraPaid": self.extra_paid,
            "unpaid": self.unpaid,
            "requiredLogout": self.required_logout.isoformat(),
        }


def calculate_required_logout(clock_in: datetime, paid_break_taken: int = 0, unpaid_break_taken: int = 0) -> datetime:
    """Clock-in + 9h, pushed out by paid break overrun and by every unpaid break minute."""
    extra_paid = max(0, int(paid_break_taken) - PAID_BREAK_ALLOWANCE_MINUTES)
    return clock_in + timedelta(minutes=TOTAL_SHIFT_MINUTES + extra_paid + max(0, int(unpaid_break_taken)))


def break_summary(clock_in: datetime, paid_break_taken: int = 0, unpaid_break_taken: int = 0) -> BreakSummary:
    return BreakSummary(
        paid_break_allowance=PAID_BREAK_ALLOWANCE_MINUTES,
        paid_taken=int(paid_break_taken),
        extra_paid=max(0, int(paid_break_taken) - PAID_BREAK_ALLOWANCE_MINUTES),
        unpaid=int(unpaid_break_taken),
        required_logout=calculate_required_logout(clock_in, paid_break_taken, unpaid_break_taken),
    )
