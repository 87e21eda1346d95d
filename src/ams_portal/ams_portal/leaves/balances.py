"""Leave balance bookkeeping shared by leave approval, deletion and year-end."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from ..core.enums import LeaveBalanceKind, LeaveDayType, LeaveRequestType
from ..users.model import LeaveBalances

_BALANCE_KIND = {
    LeaveRequestType.SICK: LeaveBalanceKind.SICK,
    LeaveRequestType.PLANNED: LeaveBalanceKind.PAID,
    LeaveRequestType.CASUAL: LeaveBalanceKind.CASUAL,
}


def leave_duration(dates: Iterable, leave_type: Union[LeaveDayType, str]) -> float:
    """Number of distinct dates weighted by full/half day."""
    weight = LeaveDayType(leave_type).weight
    return len(set(dates)) * weight


def request_duration(request) -> float:
    return leave_duration(request.leave_dates, request.leave_type)


def balance_kind_for(request_type: Union[LeaveRequestType, str]) -> Optional[LeaveBalanceKind]:
    try:
        return _BALANCE_KIND.get(LeaveRequestType(request_type))
    except ValueError:
        return None


def deduct(balances: LeaveBalances, kind: LeaveBalanceKind, days: float) -> LeaveBalances:
    return balances.with_value(kind, max(0.0, balances.get(kind) - float(days)))


def credit(balances: LeaveBalances, kind: LeaveBalanceKind, days: float) -> LeaveBalances:
    return balances.with_value(kind, balances.get(kind) + float(days))
