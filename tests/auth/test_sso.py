from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from src.ams_portal.ams_portal.auth.sso import SSOSettings, SSOVerifier
from src.ams_portal.ams_portal.core.exceptions import AuthenticationError


class StaticJWKClient:
    def __init__(self, public_key):
        self._key = public_key

    def get_signing_key_from_jwt(self, token):
        return SimpleNamespace(key=self._key)


@pytest.fixture(scope="module")
def portal_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def verifier(portal_key):
    return SSOVerifier(SSOSettings(), jwk_client=StaticJWKClient(portal_key.public_key()))


def _portal_token(key, **claims):
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "sso-123",
        "appEmail": "ravi@example.com",
        "iss": "sso-portal",
        "aud": "sso-apps",
        "iat": now,
        "exp": now + timedelta(minutes=5),
    }
    payload.update(claims)
    return jwt.encode(payload, key, algorithm="RS256", headers={"kid": "portal-1"})


def test_valid_portal_token(verifier, portal_key):
    claims = verifier.verify(_portal_token(portal_key))

    assert claims["appEmail"] == "ravi@example.com"


def test_wrong_audience(verifier, portal_key):
    with pytest.raises(AuthenticationError):
        verifier.verify(_portal_token(portal_key, aud="someone-else"))


def test_missing_email(verifier, portal_key):
    with pytest.raises(AuthenticationError, match="email"):
        verifier.verify(_portal_token(portal_key, appEmail=None))


def test_only_rs256_is_accepted(verifier):
    token = jwt.encode({"sub": "x"}, "shared-secret-of-sufficient-length-0001", algorithm="HS256")

    with pytest.raises(AuthenticationError, match="RS256"):
        verifier.verify(token)


def test_unconfigured_verifier():
    with pytest.raises(AuthenticationError, match="not configured"):
        SSOVerifier(SSOSettings()).verify("abc")
