from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import LeaveRequestType, RequestStatus
from ..users.model import LeaveBalances
from .model import LeaveRequest

# (balances, entitlements) -> new balances, evaluated against the locked user row
BalanceAdjustment = Callable[[LeaveBalances, LeaveBalances], LeaveBalances]


class LeaveRepository(Protocol):
    def create(self, request: LeaveRequest) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        request_types: Optional[Sequence[LeaveRequestType]] = None,
        limit: int = 500,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
        statuses: Sequence[RequestStatus] = (RequestStatus.APPROVED,),
    ) -> Sequence[LeaveRequest]:
        """Requests having at least one leave date within [start, end]."""

        raise NotImplementedError

    def save(self, request: LeaveRequest) -> bool:
        """Persist status/approval/year-end bookkeeping fields."""

        raise NotImplementedError

    def save_with_balances(
        self,
        request: LeaveRequest,
        *,
        expected_status: RequestStatus,
        adjust: Optional[BalanceAdjustment] = None,
    ) -> bool:
        """Save the request and adjust the owner's balances in one transaction.

        Returns False without writing when the stored status is no longer
        ``expected_status``.
        """

        raise NotImplementedError

    def delete(self, request_id: int) -> bool:
        raise NotImplementedError

    def delete_with_balances(
        self,
        request: LeaveRequest,
        *,
        expected_status: RequestStatus,
        adjust: Optional[BalanceAdjustment] = None,
    ) -> bool:
        """Delete the request and adjust balances in one transaction; same status guard as above."""

        raise NotImplementedError
