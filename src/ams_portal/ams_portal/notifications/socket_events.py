from __future__ import annotations

import logging
from typing import Optional

from flask import request
from flask_socketio import SocketIO, disconnect, join_room

from ..auth.decorators import user_from_claims
from ..core.exceptions import AuthenticationError
from ..users.model import User
from .service import user_room

logger = logging.getLogger(__name__)


def register_socket_events(socketio: SocketIO, container) -> None:
    """Each authenticated socket joins its own user_<id> room."""

    def authenticate(token: Optional[str]) -> User:
        claims = container.token_service.verify(token or "")
        return user_from_claims(container.users_repo, claims)

    @socketio.on("connect")
    def on_connect(auth: Optional[dict] = None):
        token = (auth or {}).get("token") or request.args.get("token")
        try:
            user = authenticate(token)
        except AuthenticationError as e:
            logger.info("Socket connection rejected: %s", e)
            return False
        join_room(user_room(user.user_id))
        logger.debug("Socket joined %s", user_room(user.user_id))
        return True

    @socketio.on("join")
    def on_join(data: Optional[dict] = None):
        # Clients may re-join after reconnect; the token decides the room.
        try:
            user = authenticate((data or {}).get("token"))
        except AuthenticationError as e:
            logger.info("Socket join rejected: %s", e)
            disconnect()
            return
        join_room(user_room(user.user_id))
