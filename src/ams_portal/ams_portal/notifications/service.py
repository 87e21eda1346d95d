from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from ..core.enums import MANAGER_ROLES, NotificationType, RequestStatus
from ..users.model import User
from ..users.repository import UserRepository
from .model import RECIPIENT_ADMIN, RECIPIENT_USER, Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

EVENT_NAME = "new_notification"


def user_room(user_id: int) -> str:
    return f"user_{user_id}"


class SocketEmitter(Protocol):
    def emit(self, event: str, data=None, **kwargs): ...


class NotificationService:
    """Persists notifications and pushes them to socket.io rooms.

    Delivery problems are logged; they never abort the calling use case.
    """

    def __init__(self, notifications: NotificationRepository, users: UserRepository, *, emitter: Optional[SocketEmitter] = None):
        self._notifications = notifications
        self._users = users
        self._emitter = emitter

    def attach_emitter(self, emitter: SocketEmitter) -> None:
        self._emitter = emitter

    def _emit(self, room: str, payload: dict) -> None:
        if self._emitter is None:
            return
        try:
            self._emitter.emit(EVENT_NAME, payload, to=room)
        except Exception:
            logger.exception("Failed to emit notification to %s", room)

    def notify_user(
        self,
        user_id: int,
        message: str,
        *,
        type: NotificationType = NotificationType.SYSTEM,
        category: str = "system",
        priority: str = "medium",
    ) -> Optional[Notification]:
        try:
            stored = self._notifications.create(
                Notification(
                    notification_id=0,
                    user_id=int(user_id),
                    message=message,
                    type=type,
                    category=category,
                    priority=priority,
                    recipient_type=RECIPIENT_USER,
                )
            )
        except Exception:
            logger.exception("Failed to store notification for user %s", user_id)
            return None
        self._emit(user_room(int(user_id)), stored.to_dict())
        return stored

    def broadcast_to_admins(
        self,
        message: str,
        *,
        type: NotificationType,
        category: str,
        priority: str = "medium",
        originating_user_id: Optional[int] = None,
    ) -> Optional[Notification]:
        try:
            stored = self._notifications.create(
                Notification(
                    notification_id=0,
                    user_id=None,
                    message=message,
                    type=type,
                    category=category,
                    priority=priority,
                    recipient_type=RECIPIENT_ADMIN,
                )
            )
            admins = self._users.list_by_roles(sorted(MANAGER_ROLES, key=lambda r: r.value))
        except Exception:
            logger.exception("Failed to broadcast admin notification")
            return None

        payload = stored.to_dict()
        for admin in admins:
            if originating_user_id is not None and admin.user_id == originating_user_id:
                continue
            self._emit(user_room(admin.user_id), payload)
        return stored

    def notify_check_in(self, user: User) -> None:
        self.broadcast_to_admins(
            f"{user.full_name} clocked in.",
            type=NotificationType.CHECK_IN,
            category="attendance",
            originating_user_id=user.user_id,
        )

    def notify_check_out(self, user: User) -> None:
        self.broadcast_to_admins(
            f"{user.full_name} clocked out.",
            type=NotificationType.CHECK_OUT,
            category="attendance",
            originating_user_id=user.user_id,
        )

    def notify_break(self, user: User, *, started: bool, paid: bool) -> None:
        kind = "paid" if paid else "unpaid"
        message = f"{user.full_name} started a {kind} break." if started else f"{user.full_name} ended their {kind} break."
        self.broadcast_to_admins(
            message,
            type=NotificationType.BREAK_START if started else NotificationType.BREAK_END,
            category="break",
            priority="low",
            originating_user_id=user.user_id,
        )

    def notify_leave_request(self, user: User, request_type: str, start: str, end: str) -> None:
        self.broadcast_to_admins(
            f"{user.full_name} requested {request_type} leave from {start} to {end}.",
            type=NotificationType.LEAVE_REQUEST,
            category="leave",
            priority="high",
            originating_user_id=user.user_id,
        )

    def notify_leave_response(
        self,
        user_id: int,
        status: RequestStatus,
        request_type: str,
        rejection_notes: Optional[str] = None,
    ) -> None:
        message = f"Your {request_type} leave request has been {status.value.lower()}."
        if status == RequestStatus.REJECTED and rejection_notes:
            message += f" Reason: {rejection_notes}"
        self.notify_user(
            user_id,
            message,
            type=NotificationType.LEAVE_APPROVAL if status == RequestStatus.APPROVED else NotificationType.LEAVE_REJECTION,
            category="leave",
            priority="high",
        )

    def notify_half_day(self, user: User, date_text: str, reason: str, *, marked: bool = True) -> None:
        verb = "marked as a half day" if marked else "no longer a half day"
        self.notify_user(
            user.user_id,
            f"Your attendance on {date_text} is {verb}. {reason}".strip(),
            type=NotificationType.HALF_DAY_MARKED,
            category="attendance",
            priority="high",
        )
        if marked:
            self.broadcast_to_admins(
                f"{user.full_name} was marked half day on {date_text}. {reason}".strip(),
                type=NotificationType.HALF_DAY_MARKED,
                category="attendance",
                originating_user_id=user.user_id,
            )

    def list_for(self, user: User, *, limit: int = 50) -> Sequence[Notification]:
        return self._notifications.list_for_user(
            user_id=user.user_id,
            include_admin=user.role in MANAGER_ROLES,
            limit=limit,
        )

    def mark_read(self, user: User, notification_id: int) -> bool:
        owner = None if user.role in MANAGER_ROLES else user.user_id
        return self._notifications.mark_read(notification_id=int(notification_id), user_id=owner)
