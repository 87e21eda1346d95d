from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..auth.decorators import token_required
from ..core.exceptions import NotFoundError


def register(app: Flask, container) -> None:
    notifications = container.notification_service

    @app.get("/api/notifications", endpoint="notifications_list")
    @token_required
    def list_notifications():
        limit = min(request.args.get("limit", default=50, type=int), 200)
        rows = notifications.list_for(g.current_user, limit=limit)
        return jsonify(
            {
                "success": True,
                "notifications": [n.to_dict() for n in rows],
                "unread": sum(1 for n in rows if not n.is_read),
            }
        )

    @app.post("/api/notifications/<int:notification_id>/read", endpoint="notifications_read")
    @token_required
    def mark_read(notification_id: int):
        if not notifications.mark_read(g.current_user, notification_id):
            raise NotFoundError("Notification not found")
        return jsonify({"success": True})
