from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import jwt

from ..core.constants import DEFAULT_JWT_KEY_ID, DEFAULT_TOKEN_DAYS
from ..core.exceptions import AuthenticationError
from ..users.model import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenSettings:
    private_key_path: Optional[str] = None
    public_key_path: Optional[str] = None
    key_id: str = DEFAULT_JWT_KEY_ID
    fallback_secret: Optional[str] = None
    expires_days: int = DEFAULT_TOKEN_DAYS


def _read_key(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    key_path = Path(path)
    if not key_path.is_file():
        return None
    text = key_path.read_text(encoding="utf-8").strip()
    return text or None


class TokenService:
    """Issues and verifies AMS access tokens.

    RS256 with a local key pair is the normal mode. When no private key is
    available and a JWT secret is configured, tokens are signed with HS256.
    """

    def __init__(
        self,
        settings: TokenSettings,
        *,
        private_key: Optional[str] = None,
        public_key: Optional[str] = None,
    ):
        self._settings = settings
        self._private_key = private_key or _read_key(settings.private_key_path)
        self._public_key = public_key or _read_key(settings.public_key_path)
        if not self._private_key and not settings.fallback_secret:
            logger.warning("No JWT private key or secret configured; token signing will fail")

    @staticmethod
    def claims_for(user: User) -> dict[str, Any]:
        return {
            "userId": user.user_id,
            "email": user.email,
            "role": user.role.value,
            "authMethod": user.auth_method.value,
        }

    def issue_for(self, user: User, *, now: Optional[datetime] = None) -> str:
        return self.sign(self.claims_for(user), now=now)

    def sign(self, payload: Mapping[str, Any], *, now: Optional[datetime] = None, expires_in: Optional[timedelta] = None) -> str:
        issued = now or datetime.now(timezone.utc)
        claims = dict(payload)
        claims["iat"] = issued
        claims["exp"] = issued + (expires_in or timedelta(days=self._settings.expires_days))

        if self._private_key:
            return jwt.encode(claims, self._private_key, algorithm="RS256", headers={"kid": self._settings.key_id})
        if self._settings.fallback_secret:
            logger.warning("Signing token with HS256 fallback secret")
            return jwt.encode(claims, self._settings.fallback_secret, algorithm="HS256")
        raise AuthenticationError("Token signing is not configured")

    def verify(self, token: str) -> dict[str, Any]:
        if not token:
            raise AuthenticationError("Token is missing")
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg")
            if alg == "RS256":
                if not header.get("kid"):
                    raise AuthenticationError("Token header has no key id")
                if not self._public_key:
                    raise AuthenticationError("Token verification key is not configured")
                return jwt.decode(token, self._public_key, algorithms=["RS256"])
            if alg == "HS256":
                if not self._settings.fallback_secret:
                    raise AuthenticationError("HS256 tokens are not accepted")
                return jwt.decode(token, self._settings.fallback_secret, algorithms=["HS256"])
            raise AuthenticationError(f"Unsupported token algorithm: {alg}")
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.info("Token rejected: %s", e)
            raise AuthenticationError("Token is invalid")
