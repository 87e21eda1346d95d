from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from werkzeug.datastructures import FileStorage
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import add_months, days_between
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import PROBATION_MONTHS
from ..core.enums import MANAGER_ROLES, AuthMethod, EmploymentStatus, Role, SaturdayPolicy
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..uploads.storage import UploadCategory, UploadStorage
from .model import LeaveBalances, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _enum_value(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


class AuthService:
    """Use case: authenticate a user (local password or verified SSO claims)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> User:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")
        if not user.password_hash:
            raise AuthenticationError("This account signs in through SSO")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # unknown hash method stored in the column
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return user

    def login_with_sso(self, claims: Mapping[str, Any]) -> User:
        email = claims.get("appEmail") or claims.get("email") or (claims.get("user") or {}).get("email")
        if not email:
            raise AuthenticationError("SSO token has no email claim")

        user = self._users.get_by_email(str(email).strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("No active account is linked to this SSO identity")
        return user


class UserService:
    """Use case: manage employees (Admin/HR) and own profile."""

    def __init__(self, users: UserRepository, *, storage: Optional[UploadStorage] = None):
        self._users = users
        self._storage = storage

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("Employee not found")
        return user

    def get_profile(self, user_id: int, today: date) -> dict:
        user = self.get(user_id)
        return {"user": user.to_public_dict(), "probation": self.probation_status(user, today)}

    def list_employees(self, *, current_role: Role, active_only: bool = True) -> Sequence[User]:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("You do not have permission")
        return self._users.list_users(active_only=active_only)

    def create_employee(
        self,
        *,
        current_role: Role,
        employee_code: str,
        full_name: str,
        email: str,
        password: Optional[str],
        role: str = Role.EMPLOYEE.value,
        auth_method: str = AuthMethod.LOCAL.value,
        joining_date: date,
        department: Optional[str] = None,
        designation: Optional[str] = None,
        saturday_policy: str = SaturdayPolicy.ALL_WORKING.value,
        employment_status: str = EmploymentStatus.PROBATION.value,
        shift_id: Optional[int] = None,
    ) -> int:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("You do not have permission")

        employee_code = require_non_empty(employee_code, "Employee code")
        full_name = require_non_empty(full_name, "Full name")
        email = require_email(email)
        role_value = _enum_value(Role, role, "Role")
        method = _enum_value(AuthMethod, auth_method, "Auth method")
        status = _enum_value(EmploymentStatus, employment_status, "Employment status")
        policy = _enum_value(SaturdayPolicy, saturday_policy, "Saturday policy")

        if role_value == Role.ADMIN and current_role != Role.ADMIN:
            raise AuthorizationError("Only an Admin can create another Admin")

        password_hash = None
        if method == AuthMethod.LOCAL:
            require_min_length(password or "", "Password", 6)
            password_hash = generate_password_hash(password)

        if self._users.get_by_email(email):
            raise ValidationError("Email already exists")
        if self._users.get_by_employee_code(employee_code):
            raise ValidationError("Employee code already exists")

        probation_end = None
        if status != EmploymentStatus.PERMANENT:
            probation_end = add_months(joining_date, PROBATION_MONTHS)

        user = User(
            user_id=0,
            employee_code=employee_code,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role_value,
            auth_method=method,
            joining_date=joining_date,
            department=department,
            designation=designation,
            saturday_policy=policy,
            employment_status=status,
            probation_end_date=probation_end,
            shift_id=int(shift_id) if shift_id else None,
            leave_balances=LeaveBalances(),
            leave_entitlements=LeaveBalances(),
        )
        user_id = self._users.create(user)
        logger.info("Employee %s (%s) created", employee_code, email)
        return user_id

    def update_employee(self, *, current_role: Role, user_id: int, changes: Mapping[str, Any]) -> User:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("You do not have permission")
        user = self.get(user_id)

        updates: dict[str, Any] = {}
        if "fullName" in changes:
            updates["full_name"] = require_non_empty(changes["fullName"], "Full name")
        if "department" in changes:
            updates["department"] = changes["department"]
        if "designation" in changes:
            updates["designation"] = changes["designation"]
        if "shiftId" in changes:
            updates["shift_id"] = int(changes["shiftId"]) if changes["shiftId"] else None
        if "alternateSaturdayPolicy" in changes:
            updates["saturday_policy"] = _enum_value(SaturdayPolicy, changes["alternateSaturdayPolicy"], "Saturday policy")
        if "role" in changes:
            updates["role"] = _enum_value(Role, changes["role"], "Role")
            if updates["role"] == Role.ADMIN and current_role != Role.ADMIN:
                raise AuthorizationError("Only an Admin can grant the Admin role")
        if "employmentStatus" in changes:
            status = _enum_value(EmploymentStatus, changes["employmentStatus"], "Employment status")
            updates["employment_status"] = status
            if status == EmploymentStatus.PERMANENT:
                updates["probation_end_date"] = None
            elif user.probation_end_date is None:
                updates["probation_end_date"] = add_months(user.joining_date, PROBATION_MONTHS)

        updated = replace(user, **updates)
        self._users.update(updated)
        return updated

    def deactivate(self, *, current_role: Role, user_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")
        user = self.get(user_id)
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deactivated")
        self._users.update(replace(user, is_active=False))

    def update_profile_image(self, *, user_id: int, file: FileStorage) -> str:
        if self._storage is None:
            raise ValidationError("File uploads are not configured")
        user = self.get(user_id)
        url = self._storage.save(file, UploadCategory.AVATAR, owner_id=user.user_id)
        self._users.update(replace(user, profile_image_url=url))
        return url

    @staticmethod
    def probation_status(user: User, today: date) -> dict:
        if user.employment_status == EmploymentStatus.PERMANENT or not user.probation_end_date:
            return {"onProbation": False, "probationEndDate": None, "daysRemaining": 0, "isOverdue": False}
        remaining = days_between(today, user.probation_end_date)
        return {
            "onProbation": True,
            "probationEndDate": user.probation_end_date.isoformat(),
            "daysRemaining": max(remaining, 0),
            "isOverdue": remaining < 0,
        }
