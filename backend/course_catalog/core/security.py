from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt import InvalidTokenError


def create_access_token(*, subject: str, ttl_seconds: int, secret: str) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(seconds=ttl_seconds)
    payload: dict[str, Any] = {
        "sub": subject,
        "exp": exp,
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_access_token(token: str, secret: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            options={"require": ["exp", "sub"]},
        )
    except InvalidTokenError as e:
        raise ValueError("Invalid token") from e


def user_id_from_token(token: str | None, secret: str) -> str | None:
    """Return the ``sub`` claim of a valid token, or None for a missing/invalid one."""
    if not token:
        return None
    try:
        payload = decode_access_token(token, secret)
    except ValueError:
        return None
    sub = payload.get("sub")
    if sub is None:
        return None
    sub = str(sub).strip()
    return sub or None


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
