import jwt
import pytest

from app.core.config import Settings
from app.core.security import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password
)

settings = Settings(_env_file=None, jwt_secret="unit-secret")


def test_password_hash_roundtrip():
    hashed = hash_password("securePassword123!", rounds=4)

    assert hashed != "securePassword123!"
    assert verify_password("securePassword123!", hashed)
    assert not verify_password("wrong", hashed)


def test_token_carries_identity_claims():
    token = create_access_token(settings, "user-1", "a@datapulse.io", "org-1")

    claims = decode_access_token(settings, token)

    assert claims["id"] == "user-1"
    assert claims["email"] == "a@datapulse.io"
    assert claims["orgId"] == "org-1"
    assert claims["exp"] - claims["iat"] == settings.token_ttl


def test_token_signed_with_other_secret_is_rejected():
    token = create_access_token(settings.model_copy(update={"jwt_secret": "other"}), "u", "e", "o")

    with pytest.raises(TokenError):
        decode_access_token(settings, token)


def test_expired_token_is_rejected():
    token = create_access_token(settings.model_copy(update={"token_ttl": -1}), "u", "e", "o")

    with pytest.raises(TokenError):
        decode_access_token(settings, token)


def test_token_without_organization_is_rejected():
    token = create_access_token(settings, "user-1", "a@datapulse.io", None)

    with pytest.raises(TokenError):
        decode_access_token(settings, token)


def test_token_without_expiry_is_rejected():
    token = jwt.encode({"id": "u", "orgId": "o"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    with pytest.raises(TokenError):
        decode_access_token(settings, token)
