from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import RECIPIENT_ADMIN, Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, notification: Notification) -> Notification:
        created_at = notification.created_at or datetime.now()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, message, type, category, priority, recipient_type, is_read, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (
                    notification.user_id,
                    notification.message,
                    notification.type.value,
                    notification.category,
                    notification.priority,
                    notification.recipient_type,
                    created_at,
                ),
            )
            return replace(notification, notification_id=int(cur.lastrowid), created_at=created_at)

    def list_for_user(self, *, user_id: int, include_admin: bool, limit: int = 50) -> Sequence[Notification]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if include_admin:
            clauses.append("recipient_type=%s")
            params.append(RECIPIENT_ADMIN)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, user_id, message, type, category, priority, recipient_type, is_read, created_at
                FROM notifications
                WHERE {' OR '.join(clauses)}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [
                Notification(
                    notification_id=int(r["id"]),
                    user_id=r.get("user_id"),
                    message=r["message"],
                    type=NotificationType(r["type"]),
                    category=r["category"],
                    priority=r["priority"],
                    recipient_type=r["recipient_type"],
                    is_read=bool(r["is_read"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def mark_read(self, *, notification_id: int, user_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if user_id is None:
                cur.execute("UPDATE notifications SET is_read=1 WHERE id=%s", (int(notification_id),))
            else:
                cur.execute(
                    "UPDATE notifications SET is_read=1 WHERE id=%s AND user_id=%s",
                    (int(notification_id), int(user_id)),
                )
            return cur.rowcount > 0
