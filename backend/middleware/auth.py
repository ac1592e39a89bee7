"""
Access-token helpers.

Flow:
  - POST /auth/login verifies email + bcrypt password and issues a JWT
    (HS256, `sub` = user id, `role`).
  - Protected endpoints read `Authorization: Bearer <jwt>`. A bare token
    without the `Bearer` prefix is also accepted; the storefront client
    sends it that way.
"""
import logging
from datetime import datetime, timezone, timedelta
from fastapi import Header
from typing import Optional

import jwt

from config import settings
from domain.errors import DomainError, UnauthorizedError

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_authorization(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    value = authorization.strip()
    parts = value.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        value = parts[1].strip()
    elif len(parts) == 2:
        return None
    return value or None


def _require_secret() -> str:
    if not settings.jwt_secret:
        raise DomainError("Server auth misconfigured (JWT secret missing).", status_code=500)
    return settings.jwt_secret


def decode_access_token(token: str) -> dict:
    secret = _require_secret()
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Access token expired.")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid access token.")


def issue_access_token(*, user_id: int, role: str) -> str:
    secret = _require_secret()
    now = _now_utc()
    exp = now.replace(microsecond=0) + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": str(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


async def require_token_subject(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> int:
    """Resolve the caller's user id from the access token, or 401."""
    token = _parse_authorization(authorization)
    if not token:
        raise UnauthorizedError("Authentication required. Provide Authorization: Bearer <token>.")
    payload = decode_access_token(token)
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        logger.warning(f"Access token with non-numeric subject: {payload.get('sub')!r}")
        raise UnauthorizedError("Invalid access token.")
