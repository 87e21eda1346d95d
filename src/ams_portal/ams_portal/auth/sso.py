from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import jwt
from jwt import PyJWKClient

from ..core.constants import DEFAULT_SSO_AUDIENCE, DEFAULT_SSO_ISSUER
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SSOSettings:
    jwks_url: Optional[str] = None
    issuer: str = DEFAULT_SSO_ISSUER
    audience: str = DEFAULT_SSO_AUDIENCE
    cache_seconds: int = 900


class SSOVerifier:
    """Verifies RS256 tokens issued by the SSO portal against its JWKS."""

    def __init__(self, settings: SSOSettings, *, jwk_client: Optional[PyJWKClient] = None):
        self._settings = settings
        self._client = jwk_client
        if self._client is None and settings.jwks_url:
            self._client = PyJWKClient(settings.jwks_url, cache_jwk_set=True, lifespan=settings.cache_seconds)

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    def verify(self, token: str) -> dict[str, Any]:
        if not token:
            raise AuthenticationError("SSO token is missing")
        if not self.is_configured:
            raise AuthenticationError("SSO is not configured")

        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError:
            raise AuthenticationError("SSO token is malformed")
        if header.get("alg") != "RS256":
            raise AuthenticationError("SSO tokens must be signed with RS256")
        if not header.get("kid"):
            raise AuthenticationError("SSO token header has no key id")

        try:
            signing_key = self._client.get_signing_key_from_jwt(token)
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=self._settings.issuer,
                audience=self._settings.audience,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("SSO token has expired")
        except jwt.PyJWTError as e:
            logger.warning("SSO token verification failed: %s", e)
            raise AuthenticationError("SSO token verification failed")

        if not claims.get("sub"):
            raise AuthenticationError("SSO token is missing the subject claim")
        if not (claims.get("appEmail") or claims.get("email") or (claims.get("user") or {}).get("email")):
            raise AuthenticationError("SSO token is missing an email claim")
        return claims
