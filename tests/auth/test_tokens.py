from datetime import datetime, timedelta, timezone

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from src.ams_portal.ams_portal.auth.tokens import TokenService, TokenSettings
from src.ams_portal.ams_portal.core.exceptions import AuthenticationError


@pytest.fixture(scope="module")
def key_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
def rs256(key_pair):
    private_pem, public_pem = key_pair
    return TokenService(TokenSettings(key_id="test-key"), private_key=private_pem, public_key=public_pem)


def test_rs256_token_carries_kid_and_claims(rs256, make_user):
    token = rs256.issue_for(make_user(7))

    header = jwt.get_unverified_header(token)
    assert (header["alg"], header["kid"]) == ("RS256", "test-key")
    claims = rs256.verify(token)
    assert claims["userId"] == 7
    assert claims["role"] == "Employee"
    assert claims["authMethod"] == "local"


def test_expired_token(rs256):
    issued = datetime.now(timezone.utc) - timedelta(days=3)
    token = rs256.sign({"userId": 1}, now=issued, expires_in=timedelta(days=1))

    with pytest.raises(AuthenticationError, match="expired"):
        rs256.verify(token)


def test_rs256_token_without_kid_is_rejected(rs256, key_pair):
    token = jwt.encode({"userId": 1}, key_pair[0], algorithm="RS256")

    with pytest.raises(AuthenticationError, match="key id"):
        rs256.verify(token)


def test_hs256_fallback():
    service = TokenService(TokenSettings(fallback_secret="fallback-secret-for-tests-0123456789"))

    token = service.sign({"userId": 3})

    assert jwt.get_unverified_header(token)["alg"] == "HS256"
    assert service.verify(token)["userId"] == 3


def test_hs256_refused_without_secret(rs256):
    token = jwt.encode({"userId": 1}, "another-secret-of-sufficient-length-42", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        rs256.verify(token)


def test_signature_from_another_key_is_invalid(rs256):
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    token = jwt.encode({"userId": 1}, other, algorithm="RS256", headers={"kid": "test-key"})

    with pytest.raises(AuthenticationError, match="invalid"):
        rs256.verify(token)


def test_missing_token(rs256):
    with pytest.raises(AuthenticationError):
        rs256.verify("")
