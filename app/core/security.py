# Password hashing and bearer tokens

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings


class TokenError(Exception):
    """Raised when a bearer token cannot be decoded or lacks required claims"""


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def create_access_token(settings: Settings, user_id: str, email: str, org_id: str | None) -> str:
    """Issue a signed token carrying the caller's id, email and organization"""
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "id": user_id,
        "email": email,
        "orgId": org_id,
        "iat": now,
        "exp": now + timedelta(seconds=settings.token_ttl),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> dict[str, Any]:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.InvalidTokenError as exc:
        # ExpiredSignatureError is a subclass
        raise TokenError(str(exc)) from exc

    if not claims.get("id") or not claims.get("orgId"):
        raise TokenError("Token is missing identity claims")
    return claims
