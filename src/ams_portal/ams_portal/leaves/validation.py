"""Entitlement validation per leave type (notice, half-year quota, certificate)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import days_between, months_between
from ..core.constants import (
    CASUAL_NOTICE_DAYS,
    PLANNED_HALF_YEAR_CAP,
    PLANNED_NOTICE_MONTHS,
    SICK_LONG_LEAVE_DAYS,
)
from ..core.enums import HalfYearPeriod, LeaveBalanceKind, LeaveDayType, LeaveRequestType, RequestStatus
from ..users.model import User
from ..workdays.policy import half_year_bounds, half_year_period
from .balances import leave_duration, request_duration
from .model import LeaveRequest


@dataclass(frozen=True)
class ValidationOutcome:
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    half_year_period: Optional[HalfYearPeriod] = None
    applied_after_return: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "halfYearPeriod": self.half_year_period.value if self.half_year_period else None,
            "appliedAfterReturn": self.applied_after_return,
        }


def _fmt(n: float) -> str:
    return f"{n:g}"


class LeaveValidationService:
    def validate(
        self,
        user: User,
        request_type: LeaveRequestType,
        dates: Sequence[date],
        leave_type: LeaveDayType = LeaveDayType.FULL_DAY,
        *,
        today: date,
        approved_planned: Iterable[LeaveRequest] = (),
        medical_certificate: Optional[str] = None,
    ) -> ValidationOutcome:
        if not dates:
            return ValidationOutcome(False, ["At least one leave date is required."])
        dates = sorted(set(dates))

        if request_type == LeaveRequestType.PLANNED:
            return self._planned(user, dates, leave_type, today, approved_planned)
        if request_type == LeaveRequestType.CASUAL:
            return self._casual(user, dates, leave_type, today)
        if request_type == LeaveRequestType.SICK:
            return self._sick(user, dates, leave_type, today, medical_certificate)
        if request_type == LeaveRequestType.YEAR_END:
            return ValidationOutcome(False, ["Invalid leave request type."])
        return ValidationOutcome(True)

    @staticmethod
    def _balance_error(user: User, kind: LeaveBalanceKind, label: str, duration: float) -> Optional[str]:
        available = user.leave_balances.get(kind)
        if available < duration:
            return f"Insufficient {label} leave balance. Available: {_fmt(available)} days, Required: {_fmt(duration)} days."
        return None

    def _planned(
        self,
        user: User,
        dates: Sequence[date],
        leave_type: LeaveDayType,
        today: date,
        approved_planned: Iterable[LeaveRequest],
    ) -> ValidationOutcome:
        if not user.is_permanent:
            return ValidationOutcome(False, ["Planned leaves are only available for permanent employees."])

        errors: list[str] = []
        if months_between(today, dates[0]) < PLANNED_NOTICE_MONTHS:
            errors.append(
                f"Planned leaves must be applied at least {PLANNED_NOTICE_MONTHS} months prior to the leave start date."
            )

        period = half_year_period(dates[0])
        start, end = half_year_bounds(dates[0].year, period)
        used = sum(
            request_duration(r)
            for r in approved_planned
            if r.request_type == LeaveRequestType.PLANNED
            and r.status == RequestStatus.APPROVED
            and any(start <= d <= end for d in r.leave_dates)
        )
        duration = leave_duration(dates, leave_type)
        available = PLANNED_HALF_YEAR_CAP - used

        if used >= PLANNED_HALF_YEAR_CAP:
            errors.append(
                f"You have already used all {PLANNED_HALF_YEAR_CAP} planned leave days for {period.value} ({dates[0].year})."
            )
        elif duration > available:
            errors.append(
                f"You can only use {_fmt(available)} more day(s) of planned leave in {period.value} ({dates[0].year}). "
                f"You have already used {_fmt(used)} out of {PLANNED_HALF_YEAR_CAP} days."
            )

        balance = self._balance_error(user, LeaveBalanceKind.PAID, "planned", duration)
        if balance:
            errors.append(balance)

        return ValidationOutcome(not errors, errors, [], half_year_period=period)

    def _casual(self, user: User, dates: Sequence[date], leave_type: LeaveDayType, today: date) -> ValidationOutcome:
        if not user.is_permanent:
            return ValidationOutcome(False, ["Casual leaves are only available for permanent employees."])

        errors: list[str] = []
        notice = days_between(today, dates[0])
        if 0 <= notice < CASUAL_NOTICE_DAYS:
            errors.append(f"Casual leaves must be applied at least {CASUAL_NOTICE_DAYS} days prior to the leave start date.")

        balance = self._balance_error(user, LeaveBalanceKind.CASUAL, "casual", leave_duration(dates, leave_type))
        if balance:
            errors.append(balance)
        return ValidationOutcome(not errors, errors)

    def _sick(
        self,
        user: User,
        dates: Sequence[date],
        leave_type: LeaveDayType,
        today: date,
        medical_certificate: Optional[str],
    ) -> ValidationOutcome:
        if not user.is_permanent:
            return ValidationOutcome(False, ["Sick leaves are only available for permanent employees."])

        errors: list[str] = []
        warnings: list[str] = []
        if not (medical_certificate or "").strip():
            errors.append("Medical certificate is mandatory for sick leave applications.")

        applied_after_return = days_between(dates[-1], today) >= 0
        if not applied_after_return:
            warnings.append(
                "Sick leave is typically applied after returning to office. Please ensure you have a valid medical certificate."
            )

        duration = leave_duration(dates, leave_type)
        balance = self._balance_error(user, LeaveBalanceKind.SICK, "sick", duration)
        if balance:
            errors.append(balance)
        if duration >= SICK_LONG_LEAVE_DAYS:
            warnings.append(
                "Using all sick leave days at once. Please ensure this is necessary and you have proper medical documentation."
            )

        return ValidationOutcome(not errors, errors, warnings, applied_after_return=applied_after_return)
