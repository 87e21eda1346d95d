from __future__ import annotations

from functools import wraps
from typing import Any, Mapping, Optional

from flask import current_app, g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import User
from ..users.repository import UserRepository

CONTAINER_KEY = "ams_container"


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header.split(" ", 1)[1].strip() or None
    return request.cookies.get("token")


def user_from_claims(users: UserRepository, claims: Mapping[str, Any]) -> User:
    """Resolve verified token claims to an active user."""
    try:
        user_id = int(claims.get("userId"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")
    user = users.get_by_id(user_id)
    if not user or not user.is_active:
        raise AuthenticationError("Account not found or inactive")
    return user


def token_required(view):
    """Verify the access token and load the active user into g.current_user."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        container = current_app.extensions[CONTAINER_KEY]
        claims = container.token_service.verify(bearer_token() or "")
        g.current_user = user_from_claims(container.users_repo, claims)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        @token_required
        def wrapper(*args, **kwargs):
            if g.current_user.role not in allowed:
                raise AuthorizationError("You do not have permission")
            return view(*args, **kwargs)

        return wrapper

    return decorator
