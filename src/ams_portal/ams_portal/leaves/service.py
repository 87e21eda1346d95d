from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from werkzeug.datastructures import FileStorage

from ..common.datetime_utils import ist_naive, month_bounds, now_ist, today_ist
from ..common.validators import require_non_empty, require_non_negative_number
from ..core.enums import (
    MANAGER_ROLES,
    ExcelLogType,
    LeaveBalanceKind,
    LeaveDayType,
    LeaveRequestType,
    RequestStatus,
    YearEndAction,
)
from ..core.exceptions import AuthorizationError, NotFoundError, PolicyViolation, ValidationError
from ..notifications.service import NotificationService
from ..reports.excel_log import ExcelLogService
from ..uploads.storage import UploadCategory, UploadStorage
from ..users.model import LeaveBalances, User
from ..users.repository import UserRepository
from ..workdays.model import confirmed_dates
from ..workdays.repository import HolidayRepository
from .balances import balance_kind_for, credit, deduct, leave_duration, request_duration
from .model import LeaveApplication, LeaveRequest
from .policy import LeavePolicyService
from .repository import BalanceAdjustment, LeaveRepository
from .validation import LeaveValidationService

logger = logging.getLogger(__name__)

ALTERNATE_DATE_TYPES = frozenset({LeaveRequestType.COMPENSATORY, LeaveRequestType.SWAP})
VALIDATION_RULE = "LEAVE_VALIDATION"
BALANCE_RULE = "INSUFFICIENT_BALANCE"
STALE_REQUEST_MESSAGE = "This leave request was changed by someone else; reload and try again"


def _coerce(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")


def _status_adjustment(
    kind: LeaveBalanceKind, days: float, previous: RequestStatus, new_status: Optional[RequestStatus]
) -> BalanceAdjustment:
    """Credit back an approved request, then deduct if it becomes approved; None means deleted."""

    def adjust(balances: LeaveBalances, _entitlements: LeaveBalances) -> LeaveBalances:
        if previous == RequestStatus.APPROVED:
            balances = credit(balances, kind, days)
        if new_status == RequestStatus.APPROVED:
            balances = deduct(balances, kind, days)
        return balances

    return adjust


def _reset_to_entitlement(kind: LeaveBalanceKind) -> BalanceAdjustment:
    def adjust(balances: LeaveBalances, entitlements: LeaveBalances) -> LeaveBalances:
        return balances.with_value(kind, entitlements.get(kind))

    return adjust


class LeaveService:
    def __init__(
        self,
        leaves: LeaveRepository,
        users: UserRepository,
        *,
        holidays: Optional[HolidayRepository] = None,
        policy: Optional[LeavePolicyService] = None,
        validation: Optional[LeaveValidationService] = None,
        storage: Optional[UploadStorage] = None,
        excel_log: Optional[ExcelLogService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self._leaves = leaves
        self._users = users
        self._holidays = holidays
        self._policy = policy or LeavePolicyService()
        self._validation = validation or LeaveValidationService()
        self._storage = storage
        self._excel_log = excel_log
        self._notifications = notifications

    def _holiday_dates(self, start: date, end: date) -> frozenset[date]:
        if self._holidays is None:
            return frozenset()
        return confirmed_dates(self._holidays.list_between(start=start, end=end, include_tentative=False))

    def _evaluate(
        self,
        user: User,
        request_type: LeaveRequestType,
        leave_type: LeaveDayType,
        dates: Sequence[date],
        *,
        today: date,
        medical_certificate: Optional[str],
        admin_override_reason: Optional[str],
    ):
        approved_planned = self._leaves.list_requests(
            user_id=user.user_id,
            status=RequestStatus.APPROVED,
            request_types=[LeaveRequestType.PLANNED],
        )
        outcome = self._validation.validate(
            user,
            request_type,
            dates,
            leave_type,
            today=today,
            approved_planned=approved_planned,
            medical_certificate=medical_certificate,
        )

        month_start, month_end = month_bounds(dates[0].year, dates[0].month)
        existing = self._leaves.list_overlapping(
            start=month_start,
            end=month_end,
            user_id=user.user_id,
            statuses=(RequestStatus.PENDING, RequestStatus.APPROVED),
        )
        decision = self._policy.validate_request(
            user,
            request_type,
            leave_type,
            dates,
            today=today,
            existing_requests=existing,
            holiday_dates=self._holiday_dates(min(month_start, dates[0]), max(month_end, dates[-1])),
            admin_override_reason=admin_override_reason,
        )
        balance = self._policy.check_leave_balance(user, request_type, leave_duration(dates, leave_type))
        return outcome, decision, balance

    def check_eligibility(
        self,
        user: User,
        *,
        request_type: str,
        leave_type: str = LeaveDayType.FULL_DAY.value,
        dates: Iterable[date],
        medical_certificate: Optional[str] = None,
        today: Optional[date] = None,
    ) -> dict:
        request_type = _coerce(LeaveRequestType, request_type, "request type")
        leave_type = _coerce(LeaveDayType, leave_type, "leave type")
        dates = sorted(set(dates))
        if not dates:
            raise PolicyViolation("Invalid leave dates provided", "INVALID_DATES")

        outcome, decision, balance = self._evaluate(
            user,
            request_type,
            leave_type,
            dates,
            today=today or today_ist(),
            medical_certificate=medical_certificate,
            admin_override_reason=None,
        )
        return {
            "validation": outcome.to_dict(),
            "policy": decision.to_dict(),
            "balance": {"sufficient": balance.sufficient, "reason": balance.reason},
            "duration": leave_duration(dates, leave_type),
        }

    def apply(
        self,
        user: User,
        *,
        request_type: str,
        leave_type: str = LeaveDayType.FULL_DAY.value,
        dates: Iterable[date],
        reason: str,
        alternate_date: Optional[date] = None,
        medical_certificate: Optional[str] = None,
        admin_override_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveApplication:
        request_type = _coerce(LeaveRequestType, request_type, "request type")
        leave_type = _coerce(LeaveDayType, leave_type, "leave type")
        if request_type == LeaveRequestType.YEAR_END:
            raise ValidationError("Year-End requests must be submitted through the Year-End endpoint")
        reason = require_non_empty(reason, "Reason")
        if request_type in ALTERNATE_DATE_TYPES and alternate_date is None:
            raise ValidationError(f"{request_type.value} requires an alternate date")

        now = ist_naive(now or now_ist())
        today = now.date()
        dates = sorted(set(dates))
        if not dates:
            raise PolicyViolation("Invalid leave dates provided", "INVALID_DATES")
        if admin_override_reason and user.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can override leave policy")

        outcome, decision, balance = self._evaluate(
            user,
            request_type,
            leave_type,
            dates,
            today=today,
            medical_certificate=medical_certificate,
            admin_override_reason=admin_override_reason,
        )
        if not admin_override_reason:
            if not outcome.valid:
                raise PolicyViolation(" ".join(outcome.errors), VALIDATION_RULE)
            if not decision.allowed:
                raise PolicyViolation(decision.reason, decision.rule)
            if not balance.sufficient:
                raise PolicyViolation(balance.reason, BALANCE_RULE)

        request = LeaveRequest(
            request_id=0,
            user_id=user.user_id,
            request_type=request_type,
            leave_type=leave_type,
            leave_dates=tuple(dates),
            alternate_date=alternate_date,
            reason=reason,
            medical_certificate=medical_certificate,
            is_backdated=dates[0] < today or request_type == LeaveRequestType.BACKDATED,
            applied_after_return=bool(outcome.applied_after_return),
            half_year_period=outcome.half_year_period,
            created_at=now,
        )
        request = replace(request, request_id=self._leaves.create(request))
        logger.info("Leave request %s submitted by user %s (%s)", request.request_id, user.user_id, request_type.value)

        if self._excel_log:
            self._excel_log.log_event(
                user,
                ExcelLogType.LEAVE_REQUEST_SUBMITTED,
                f"{request_type.value} {dates[0].isoformat()}..{dates[-1].isoformat()}",
                at=now,
            )
        if self._notifications:
            self._notifications.notify_leave_request(
                user, request_type.value, dates[0].isoformat(), dates[-1].isoformat()
            )
        return LeaveApplication(request, tuple(outcome.warnings))

    def list_mine(self, user: User, *, status: Optional[str] = None) -> Sequence[LeaveRequest]:
        status = _coerce(RequestStatus, status, "status") if status else None
        return [r for r in self._leaves.list_requests(user_id=user.user_id, status=status) if not r.is_year_end]

    def list_all(
        self,
        admin: User,
        *,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        if admin.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can view all leave requests")
        status = _coerce(RequestStatus, status, "status") if status else None

        if year and month:
            start, end = month_bounds(int(year), int(month))
            statuses = (status,) if status else tuple(RequestStatus)
            rows = self._leaves.list_overlapping(start=start, end=end, user_id=user_id, statuses=statuses)
        else:
            rows = self._leaves.list_requests(user_id=user_id, status=status)
        return [r for r in rows if not r.is_year_end]

    def get(self, user: User, request_id: int) -> LeaveRequest:
        request = self._leaves.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        if request.user_id != user.user_id and user.role not in MANAGER_ROLES:
            raise AuthorizationError("You can only view your own leave requests")
        return request

    def _employee(self, user_id: int) -> User:
        employee = self._users.get_by_id(user_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def update_status(
        self,
        admin: User,
        request_id: int,
        *,
        status: str,
        rejection_notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        if admin.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can update leave status")
        new_status = _coerce(RequestStatus, status, "status")
        request = self._leaves.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        if request.is_year_end:
            raise ValidationError("Year-End requests must be processed through the Year-End endpoint")
        if new_status == request.status:
            return request

        now = ist_naive(now or now_ist())
        employee = self._employee(request.user_id)
        kind = balance_kind_for(request.request_type)
        adjust = (
            _status_adjustment(kind, request_duration(request), request.status, new_status)
            if kind is not None
            else None
        )

        updated = replace(
            request,
            status=new_status,
            approved_by=admin.user_id if new_status != RequestStatus.PENDING else None,
            approved_at=now if new_status != RequestStatus.PENDING else None,
            rejection_notes=(rejection_notes or None) if new_status == RequestStatus.REJECTED else None,
        )
        if not self._leaves.save_with_balances(updated, expected_status=request.status, adjust=adjust):
            raise ValidationError(STALE_REQUEST_MESSAGE)
        logger.info("Leave request %s moved %s -> %s by %s", request.request_id, request.status.value, new_status.value, admin.user_id)

        if new_status != RequestStatus.PENDING:
            if self._excel_log:
                event = (
                    ExcelLogType.LEAVE_REQUEST_APPROVED
                    if new_status == RequestStatus.APPROVED
                    else ExcelLogType.LEAVE_REQUEST_REJECTED
                )
                self._excel_log.log_event(employee, event, f"Request #{request.request_id} by {admin.full_name}", at=now)
            if self._notifications:
                self._notifications.notify_leave_response(
                    employee.user_id, new_status, request.request_type.value, updated.rejection_notes
                )
        return updated

    def delete(self, user: User, request_id: int) -> None:
        request = self._leaves.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        is_manager = user.role in MANAGER_ROLES
        if request.user_id != user.user_id and not is_manager:
            raise AuthorizationError("You can only delete your own leave requests")
        if request.status == RequestStatus.REJECTED:
            raise ValidationError("Cannot delete a rejected leave request")

        adjust = None
        if request.status == RequestStatus.APPROVED:
            if request.is_year_end:
                if request.year_end_action == YearEndAction.CARRY_FORWARD and request.year_end_leave_type:
                    adjust = _reset_to_entitlement(request.year_end_leave_type)
            else:
                kind = balance_kind_for(request.request_type)
                if kind is not None:
                    adjust = _status_adjustment(kind, request_duration(request), request.status, None)

        if not self._leaves.delete_with_balances(request, expected_status=request.status, adjust=adjust):
            raise ValidationError(STALE_REQUEST_MESSAGE)
        logger.info("Leave request %s deleted by user %s", request.request_id, user.user_id)

    def allocate(
        self,
        admin: User,
        *,
        entitlements: Mapping[str, float],
        user_ids: Optional[Sequence[int]] = None,
    ) -> int:
        """Set entitlement and balance for the given kinds; None targets every active employee."""
        if admin.role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can allocate leave")

        values: dict[LeaveBalanceKind, float] = {}
        for key, raw in entitlements.items():
            kind = _coerce(LeaveBalanceKind, str(key).lower(), "leave kind")
            values[kind] = require_non_negative_number(raw, f"{kind.value} entitlement")
        if not values:
            raise ValidationError("No entitlements provided")

        if user_ids is None:
            targets = list(self._users.list_users(active_only=True))
        else:
            targets = [self._employee(int(uid)) for uid in user_ids]

        for employee in targets:
            balances, granted = employee.leave_balances, employee.leave_entitlements
            for kind, value in values.items():
                balances = balances.with_value(kind, value)
                granted = granted.with_value(kind, value)
            self._users.update_leave_balances(employee.user_id, balances=balances, entitlements=granted)

        logger.info("Allocated %s to %d employees", {k.value: v for k, v in values.items()}, len(targets))
        return len(targets)

    def upload_medical_certificate(self, user: User, file: FileStorage) -> str:
        if self._storage is None:
            raise ValidationError("File uploads are not configured")
        return self._storage.save(file, UploadCategory.MEDICAL_CERTIFICATE, owner_id=user.user_id)

    def attach_medical_certificate(self, user: User, request_id: int, file: FileStorage) -> LeaveRequest:
        request = self._leaves.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        if request.user_id != user.user_id:
            raise AuthorizationError("You can only update your own leave requests")
        if request.request_type != LeaveRequestType.SICK:
            raise ValidationError("Medical certificates apply to sick leave only")

        url = self.upload_medical_certificate(user, file)
        updated = replace(request, medical_certificate=url)
        self._leaves.save(updated)
        return updated
