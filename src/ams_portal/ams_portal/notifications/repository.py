from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Notification


class NotificationRepository(Protocol):
    def create(self, notification: Notification) -> Notification:
        """Persist and return the stored notification (with id and created_at)."""

        raise NotImplementedError

    def list_for_user(self, *, user_id: int, include_admin: bool, limit: int = 50) -> Sequence[Notification]:
        raise NotImplementedError

    def mark_read(self, *, notification_id: int, user_id: Optional[int]) -> bool:
        raise NotImplementedError
