"""Company leave policy rules, evaluated in a fixed order.

The first failing rule wins and is reported by its code so clients can
show a tailored message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import AbstractSet, Iterable, Optional, Sequence

from ..common.datetime_utils import days_between
from ..core.constants import (
    CASUAL_NOTICE_DAYS,
    MONTHLY_REQUEST_LIMIT,
    MONTHLY_WORKING_DAYS_LIMIT,
    PLANNED_LONG_NOTICE_DAYS,
    PLANNED_LONG_THRESHOLD_DAYS,
    PLANNED_NOTICE_DAYS,
    WEEKDAY_RULE_BYPASS_DAYS,
)
from ..core.enums import LeaveDayType, LeaveRequestType, RequestStatus, SaturdayPolicy
from ..users.model import User
from ..workdays.policy import count_working_days, is_saturday_off
from .balances import balance_kind_for
from .model import LeaveRequest

logger = logging.getLogger(__name__)

TUESDAY, THURSDAY, FRIDAY = 1, 3, 4

NON_PERMANENT_TYPES = frozenset(
    {
        LeaveRequestType.LOSS_OF_PAY,
        LeaveRequestType.COMPENSATORY,
        LeaveRequestType.BACKDATED,
        LeaveRequestType.SWAP,
    }
)
NO_BALANCE_TYPES = NON_PERMANENT_TYPES


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: str
    rule: str

    def to_dict(self) -> dict:
        return {"allowed": self.allowed, "reason": self.reason, "rule": self.rule}


@dataclass(frozen=True)
class BalanceCheck:
    sufficient: bool
    reason: str


_OK = PolicyDecision(True, "Leave request meets all policy requirements", "APPROVED")


def _deny(reason: str, rule: str) -> PolicyDecision:
    return PolicyDecision(False, reason, rule)


def _plural(n, word: str) -> str:
    return f"{n:g} {word}" + ("" if n == 1 else "s")


def _month_working_days(dates: Iterable[date], holiday_dates: AbstractSet[date]) -> int:
    """The monthly cap skips Sundays and holidays only; off Saturdays still count."""
    return count_working_days(dates, SaturdayPolicy.ALL_WORKING, holiday_dates)


class LeavePolicyService:
    def validate_request(
        self,
        user: User,
        request_type: LeaveRequestType,
        leave_type: LeaveDayType,
        dates: Sequence[date],
        *,
        today: date,
        existing_requests: Iterable[LeaveRequest] = (),
        holiday_dates: AbstractSet[date] = frozenset(),
        admin_override_reason: Optional[str] = None,
    ) -> PolicyDecision:
        if admin_override_reason:
            logger.warning(
                "Leave policy override for user %s (%s, %s): %s",
                user.user_id,
                request_type.value,
                ", ".join(d.isoformat() for d in dates),
                admin_override_reason,
            )
            return PolicyDecision(True, "Admin override applied", "ADMIN_OVERRIDE")

        if not dates:
            return _deny("Invalid leave dates provided", "INVALID_DATES")
        dates = sorted(set(dates))

        for check in (
            lambda: self._employee_type(user, request_type),
            lambda: self._backdated(user, request_type, dates, today),
            lambda: self._type_specific(user, request_type, dates, today),
            lambda: self._monthly_caps(request_type, leave_type, dates, existing_requests, holiday_dates),
            lambda: self._weekday_restrictions(user, request_type, dates, today),
        ):
            decision = check()
            if decision is not None:
                return decision
        return _OK

    @staticmethod
    def _employee_type(user: User, request_type: LeaveRequestType) -> Optional[PolicyDecision]:
        if user.is_permanent or request_type in NON_PERMANENT_TYPES:
            return None
        status = user.employment_status.value.lower()
        return _deny(
            f"During {status}, only Loss of Pay (LOP) leave is allowed. "
            f"{request_type.value} leave will be available after confirmation.",
            "EMPLOYEE_TYPE_RESTRICTION",
        )

    @staticmethod
    def _backdated(user: User, request_type: LeaveRequestType, dates: Sequence[date], today: date) -> Optional[PolicyDecision]:
        if dates[0] >= today or user.is_permanent:
            return None
        if request_type == LeaveRequestType.LOSS_OF_PAY:
            return None
        days_past = days_between(dates[0], today)
        return _deny(
            f"This leave is for {_plural(days_past, 'day')} ago. During "
            f"{user.employment_status.value.lower()}, backdated leave must be applied as Loss of Pay (LOP).",
            "BACKDATED_LOP_REQUIRED",
        )

    @staticmethod
    def _planned_required_notice(user: User, dates: Sequence[date]) -> tuple[int, int]:
        # Holidays are not subtracted here: the notice window depends only on the Saturday policy.
        working = count_working_days(dates, user.saturday_policy)
        required = PLANNED_LONG_NOTICE_DAYS if working > PLANNED_LONG_THRESHOLD_DAYS else PLANNED_NOTICE_DAYS
        return working, required

    def _type_specific(
        self,
        user: User,
        request_type: LeaveRequestType,
        dates: Sequence[date],
        today: date,
    ) -> Optional[PolicyDecision]:
        notice = days_between(today, dates[0])
        backdated_permanent = notice < 0 and user.is_permanent

        if request_type == LeaveRequestType.CASUAL:
            if not backdated_permanent and notice < CASUAL_NOTICE_DAYS:
                return _deny(
                    f"Casual leave must be applied at least {CASUAL_NOTICE_DAYS} days in advance. "
                    f"You applied this leave only {_plural(notice, 'day')} before the start date.",
                    "CASUAL_ADVANCE_NOTICE",
                )
        elif request_type == LeaveRequestType.PLANNED:
            working, required = self._planned_required_notice(user, dates)
            if not backdated_permanent and notice < required:
                period = "2 months" if required == PLANNED_LONG_NOTICE_DAYS else "1 month"
                return _deny(
                    f"Planned leave of {_plural(working, 'working day')} requires at least {period} advance notice. "
                    "Please apply earlier or contact Admin if this is an emergency.",
                    "PLANNED_ADVANCE_NOTICE",
                )
        elif request_type == LeaveRequestType.COMPENSATORY:
            if today.weekday() > THURSDAY:
                return _deny(
                    "Comp-Off requests must be submitted by Thursday of the same week. "
                    f"Today is {today.strftime('%A')}, which is past the deadline.",
                    "COMPOFF_THURSDAY_DEADLINE",
                )
        return None

    @staticmethod
    def _monthly_caps(
        request_type: LeaveRequestType,
        leave_type: LeaveDayType,
        dates: Sequence[date],
        existing_requests: Iterable[LeaveRequest],
        holiday_dates: AbstractSet[date],
    ) -> Optional[PolicyDecision]:
        first = dates[0]
        month_label = first.strftime("%B %Y")
        in_month = [
            r
            for r in existing_requests
            if r.status in (RequestStatus.PENDING, RequestStatus.APPROVED)
            and not r.is_year_end
            and any(d.year == first.year and d.month == first.month for d in r.leave_dates)
        ]

        if len(in_month) >= MONTHLY_REQUEST_LIMIT:
            return _deny(
                f"You have already submitted {len(in_month)} leave requests for {month_label}. "
                f"The maximum allowed is {MONTHLY_REQUEST_LIMIT} requests per month.",
                "MONTHLY_REQUEST_LIMIT",
            )

        if request_type == LeaveRequestType.PLANNED:
            return None

        used = 0.0
        for r in in_month:
            if r.request_type == LeaveRequestType.PLANNED:
                continue
            used += _month_working_days(r.leave_dates, holiday_dates) * r.leave_type.weight
        requested = _month_working_days(dates, holiday_dates) * leave_type.weight

        if used + requested > MONTHLY_WORKING_DAYS_LIMIT:
            return _deny(
                f"You have already used {_plural(used, 'working day')} of leave in {month_label}. "
                f"This request would exceed the monthly limit of {MONTHLY_WORKING_DAYS_LIMIT} working days.",
                "MONTHLY_WORKING_DAYS_LIMIT",
            )
        return None

    def _weekday_restrictions(
        self,
        user: User,
        request_type: LeaveRequestType,
        dates: Sequence[date],
        today: date,
    ) -> Optional[PolicyDecision]:
        notice = days_between(today, dates[0])

        if request_type == LeaveRequestType.PLANNED:
            _, required = self._planned_required_notice(user, dates)
            if notice >= required:
                return None
        if request_type in (LeaveRequestType.CASUAL, LeaveRequestType.LOSS_OF_PAY) and notice > WEEKDAY_RULE_BYPASS_DAYS:
            return None

        hint = f"Apply at least {WEEKDAY_RULE_BYPASS_DAYS} days in advance for more flexibility."
        for d in dates:
            weekday = d.weekday()
            if weekday == TUESDAY:
                return _deny(
                    f"Leave cannot be applied on Tuesday when requested within {WEEKDAY_RULE_BYPASS_DAYS} days. {hint}",
                    "TUESDAY_BLOCKED",
                )
            if weekday == THURSDAY:
                return _deny(
                    f"Leave cannot be applied on Thursday when requested within {WEEKDAY_RULE_BYPASS_DAYS} days. {hint}",
                    "THURSDAY_BLOCKED",
                )
            if weekday == FRIDAY and is_saturday_off(d + timedelta(days=1), user.saturday_policy):
                return _deny(
                    f"Leave cannot be applied on Friday, {d.strftime('%d %b %Y')} because the following "
                    f"Saturday is scheduled off. {hint}",
                    "FRIDAY_BEFORE_SATURDAY_OFF",
                )
        return None

    @staticmethod
    def check_leave_balance(user: User, request_type: LeaveRequestType, duration: float) -> BalanceCheck:
        if request_type in NO_BALANCE_TYPES:
            return BalanceCheck(True, "No balance check required")
        kind = balance_kind_for(request_type)
        if kind is None:
            return BalanceCheck(False, "Unable to process this leave type. Please contact HR for assistance.")

        available = user.leave_balances.get(kind)
        if available < duration:
            label = "planned" if kind.value == "paid" else kind.value
            return BalanceCheck(
                False,
                f"You have {_plural(available, 'day')} of {label} leave remaining, but this request requires "
                f"{_plural(duration, 'day')}. Please reduce the duration or contact HR if you need additional leave.",
            )
        return BalanceCheck(True, "Sufficient balance available")
