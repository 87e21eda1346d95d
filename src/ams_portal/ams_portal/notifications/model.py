from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationType

RECIPIENT_USER = "user"
RECIPIENT_ADMIN = "admin"


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: Optional[int]
    message: str
    type: NotificationType
    category: str = "system"
    priority: str = "medium"
    recipient_type: str = RECIPIENT_USER
    is_read: bool = False
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.notification_id,
            "userId": self.user_id,
            "message": self.message,
            "type": self.type.value,
            "category": self.category,
            "priority": self.priority,
            "recipientType": self.recipient_type,
            "read": self.is_read,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
