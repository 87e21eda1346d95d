from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import LeaveBalances, User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(self, *, active_only: bool = True) -> Sequence[User]:
        raise NotImplementedError

    def list_by_roles(self, roles: Sequence[Role]) -> Sequence[User]:
        raise NotImplementedError

    def create(self, user: User) -> int:
        """Persist a new user; user.user_id is ignored."""

        raise NotImplementedError

    def update(self, user: User) -> bool:
        raise NotImplementedError

    def update_leave_balances(
        self,
        user_id: int,
        *,
        balances: LeaveBalances,
        entitlements: Optional[LeaveBalances] = None,
    ) -> bool:
        raise NotImplementedError
