from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from loan_console.core.settings import settings

TOKEN_TYPE = "console_access"


def create_access_token(
    username: str, session_id: str, expires_delta: timedelta | None = None
) -> tuple[str, datetime]:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode: dict[str, Any] = {
        "sub": username,
        "sid": session_id,
        "exp": expire,
        "type": TOKEN_TYPE,
    }
    token = jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, expire


def decode_token(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    if payload.get("type") != TOKEN_TYPE:
        raise ValueError(f"Unexpected token type: {payload.get('type')}")
    if not payload.get("sub") or not payload.get("sid"):
        raise ValueError("Invalid token")
    return payload
