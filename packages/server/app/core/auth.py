"""
Requester identity for Tubehub.

Sessions are issued elsewhere; this module only verifies the signed access
token that arrives with a request and resolves it to a ``User``:

- ``accessToken`` cookie (browser clients)
- ``Authorization: Bearer <token>`` header (API clients)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import Unauthorized
from app.models.user import User

log = structlog.get_logger()
settings = get_settings()

ACCESS_TOKEN_COOKIE = "accessToken"

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_access_token(
    user_id: uuid.UUID,
    username: str | None = None,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token for a user."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "username": username,
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and verify an access token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    """Pull the raw token from the cookie, falling back to the Bearer header."""
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


# ---------------------------------------------------------------------------
# Authentication dependency
# ---------------------------------------------------------------------------

class AuthenticatedUser:
    """Container for the user making the request."""

    def __init__(self, user: User):
        self.user_id = user.id


async def get_authenticated_user(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedUser:
    """Resolve the requester from the access token, or fail with 401."""
    token = extract_token(request, authorization)
    if not token:
        raise Unauthorized("Unauthorized request")

    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid access token") from None

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        log.info("auth.unknown_user", user_id=str(user_id))
        raise Unauthorized("Invalid access token")

    return AuthenticatedUser(user)
