from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

from ..core.constants import (
    DEFAULT_CASUAL_ENTITLEMENT,
    DEFAULT_PAID_ENTITLEMENT,
    DEFAULT_SICK_ENTITLEMENT,
)
from ..core.enums import AuthMethod, EmploymentStatus, LeaveBalanceKind, Role, SaturdayPolicy


@dataclass(frozen=True)
class LeaveBalances:
    """Days per leave bucket (used both for balances and entitlements)."""

    sick: float = DEFAULT_SICK_ENTITLEMENT
    casual: float = DEFAULT_CASUAL_ENTITLEMENT
    paid: float = DEFAULT_PAID_ENTITLEMENT

    def get(self, kind: LeaveBalanceKind) -> float:
        return float(getattr(self, kind.value))

    def with_value(self, kind: LeaveBalanceKind, value: float) -> "LeaveBalances":
        return replace(self, **{kind.value: float(value)})

    def as_dict(self) -> dict:
        return {"sick": self.sick, "casual": self.casual, "paid": self.paid}


@dataclass(frozen=True)
class User:
    """Domain entity: employee account."""

    user_id: int
    employee_code: str
    full_name: str
    email: str
    password_hash: Optional[str]
    role: Role
    joining_date: date
    auth_method: AuthMethod = AuthMethod.LOCAL
    department: Optional[str] = None
    designation: Optional[str] = None
    saturday_policy: SaturdayPolicy = SaturdayPolicy.ALL_WORKING
    employment_status: EmploymentStatus = EmploymentStatus.PROBATION
    probation_end_date: Optional[date] = None
    shift_id: Optional[int] = None
    profile_image_url: Optional[str] = None
    is_active: bool = True
    leave_balances: LeaveBalances = field(default_factory=LeaveBalances)
    leave_entitlements: LeaveBalances = field(default_factory=LeaveBalances)

    @property
    def is_permanent(self) -> bool:
        return self.employment_status is EmploymentStatus.PERMANENT

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "employeeCode": self.employee_code,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role.value,
            "authMethod": self.auth_method.value,
            "department": self.department,
            "designation": self.designation,
            "joiningDate": self.joining_date.isoformat(),
            "alternateSaturdayPolicy": self.saturday_policy.value,
            "employmentStatus": self.employment_status.value,
            "probationEndDate": self.probation_end_date.isoformat() if self.probation_end_date else None,
            "shiftId": self.shift_id,
            "profileImageUrl": self.profile_image_url,
            "isActive": self.is_active,
            "leaveBalances": self.leave_balances.as_dict(),
            "leaveEntitlements": self.leave_entitlements.as_dict(),
        }
