"""Year-end carry-forward / encashment of unused leave.

A request is filed for the closing year; its effect lands on the next
year's opening balance. Approval is applied exactly once (is_processed).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import ist_naive, now_ist
from ..core.enums import (
    MANAGER_ROLES,
    ExcelLogType,
    LeaveBalanceKind,
    LeaveDayType,
    LeaveRequestType,
    RequestStatus,
    YearEndAction,
)
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..reports.excel_log import ExcelLogService
from ..users.model import LeaveBalances, User
from ..users.repository import UserRepository
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

DECEMBER = 12
ALREADY_PROCESSED_MESSAGE = "This request has already been processed"


def apply_year_end(
    balances: LeaveBalances,
    entitlements: LeaveBalances,
    *,
    action: YearEndAction,
    kind: LeaveBalanceKind,
    days: float,
    closing_year: int,
    today: date,
) -> LeaveBalances:
    if action == YearEndAction.ENCASH:
        return balances

    in_target_year = today.year >= closing_year + 1
    december_of_closing = today.year == closing_year and today.month == DECEMBER
    if in_target_year or december_of_closing:
        return balances.with_value(kind, entitlements.get(kind) + float(days))
    return balances.with_value(kind, balances.get(kind) + float(days))


class YearEndService:
    def __init__(
        self,
        leaves: LeaveRepository,
        users: UserRepository,
        *,
        excel_log: Optional[ExcelLogService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self._leaves = leaves
        self._users = users
        self._excel_log = excel_log
        self._notifications = notifications

    def submit(
        self,
        user: User,
        *,
        leave_type: str,
        action: str,
        days: float,
        year: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = ist_naive(now or now_ist())
        try:
            kind = LeaveBalanceKind(str(leave_type).lower())
            action = YearEndAction(str(action).upper())
        except ValueError:
            raise ValidationError("Invalid year-end leave type or action")
        try:
            days = float(days)
        except (TypeError, ValueError):
            raise ValidationError("Days must be a number")
        if days <= 0:
            raise ValidationError("Days must be greater than zero")

        available = user.leave_balances.get(kind)
        if days > available:
            raise ValidationError(f"Requested {days:g} days exceeds the available {kind.value} balance of {available:g}")

        year = int(year or now.year)
        for existing in self._leaves.list_requests(user_id=user.user_id, request_types=[LeaveRequestType.YEAR_END]):
            if (
                existing.year_end_year == year
                and existing.year_end_leave_type == kind
                and existing.status != RequestStatus.REJECTED
            ):
                raise ValidationError(f"A year-end request for {kind.value} leave in {year} already exists")

        request = LeaveRequest(
            request_id=0,
            user_id=user.user_id,
            request_type=LeaveRequestType.YEAR_END,
            leave_type=LeaveDayType.FULL_DAY,
            leave_dates=(),
            reason=f"Year-End {action.value.replace('_', ' ').title()} of {days:g} {kind.value} days ({year})",
            year_end_action=action,
            year_end_leave_type=kind,
            year_end_days=days,
            year_end_year=year,
            created_at=now,
        )
        request = replace(request, request_id=self._leaves.create(request))
        logger.info("Year-end request %s submitted by user %s", request.request_id, user.user_id)

        if self._notifications:
            self._notifications.notify_leave_request(user, "Year-End", str(year), str(year))
        return request

    def list_requests(self, admin: User, *, status: Optional[str] = None) -> Sequence[LeaveRequest]:
        if admin.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can view year-end requests")
        try:
            status = RequestStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Invalid status: {status!r}")
        return self._leaves.list_requests(status=status, request_types=[LeaveRequestType.YEAR_END])

    def _load(self, admin: User, request_id: int) -> LeaveRequest:
        if admin.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can process year-end requests")
        request = self._leaves.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Year-End request not found")
        if not request.is_year_end:
            raise ValidationError("This is not a Year-End leave request")
        if request.is_processed or request.status != RequestStatus.PENDING:
            raise ValidationError(ALREADY_PROCESSED_MESSAGE)
        return request

    def approve(self, admin: User, request_id: int, *, now: Optional[datetime] = None) -> LeaveRequest:
        request = self._load(admin, request_id)
        now = ist_naive(now or now_ist())
        employee = self._users.get_by_id(request.user_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if request.year_end_action is None or request.year_end_leave_type is None or request.year_end_year is None:
            raise ValidationError("Invalid Year-End request data")

        def adjust(balances: LeaveBalances, entitlements: LeaveBalances) -> LeaveBalances:
            return apply_year_end(
                balances,
                entitlements,
                action=request.year_end_action,
                kind=request.year_end_leave_type,
                days=float(request.year_end_days or 0),
                closing_year=request.year_end_year,
                today=now.date(),
            )

        updated = replace(
            request,
            status=RequestStatus.APPROVED,
            approved_by=admin.user_id,
            approved_at=now,
            rejection_notes=None,
            is_processed=True,
        )
        if not self._leaves.save_with_balances(updated, expected_status=RequestStatus.PENDING, adjust=adjust):
            raise ValidationError(ALREADY_PROCESSED_MESSAGE)
        logger.info(
            "Year-end request %s approved (%s %s days of %s)",
            request.request_id,
            request.year_end_action.value,
            request.year_end_days,
            request.year_end_leave_type.value,
        )
        self._after_decision(admin, employee, updated, now)
        return updated

    def reject(self, admin: User, request_id: int, *, notes: Optional[str] = None, now: Optional[datetime] = None) -> LeaveRequest:
        request = self._load(admin, request_id)
        now = ist_naive(now or now_ist())
        employee = self._users.get_by_id(request.user_id)
        if not employee:
            raise NotFoundError("Employee not found")

        updated = replace(
            request,
            status=RequestStatus.REJECTED,
            approved_by=admin.user_id,
            approved_at=now,
            rejection_notes=notes or None,
        )
        if not self._leaves.save_with_balances(updated, expected_status=RequestStatus.PENDING):
            raise ValidationError(ALREADY_PROCESSED_MESSAGE)
        self._after_decision(admin, employee, updated, now)
        return updated

    def _after_decision(self, admin: User, employee: User, request: LeaveRequest, now: datetime) -> None:
        if self._excel_log:
            event = (
                ExcelLogType.LEAVE_REQUEST_APPROVED
                if request.status == RequestStatus.APPROVED
                else ExcelLogType.LEAVE_REQUEST_REJECTED
            )
            self._excel_log.log_event(employee, event, f"Year-End #{request.request_id} by {admin.full_name}", at=now)
        if self._notifications:
            self._notifications.notify_leave_response(
                employee.user_id, request.status, "Year-End", request.rejection_notes
            )
