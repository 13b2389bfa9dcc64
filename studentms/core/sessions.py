"""Session bridge: a signed cookie holding only the user id.

The cookie is a JWT signed with SESSION_SECRET_KEY (distinct from the access
token key). Every request re-loads the user from the database, so disabling
or deleting an account takes effect immediately.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Response
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.core.config import get_settings
from studentms.core.errors import SessionDeserializationFailure, SigningFailure
from studentms.core.logging import get_logger
from studentms.models.user import User

logger = get_logger(__name__)

SESSION_ISSUER = "studentms-session"


@dataclass(frozen=True)
class SessionToken:
    user_id: uuid.UUID

    def encode(self) -> str:
        settings = get_settings()
        if not settings.session_secret_key:
            raise SigningFailure("session secret key is not configured")
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(self.user_id),
            "iat": now,
            "exp": now + timedelta(days=settings.session_max_age_days),
            "iss": SESSION_ISSUER,
        }
        try:
            return jwt.encode(payload, settings.session_secret_key, algorithm="HS256")
        except jwt.PyJWTError as exc:
            raise SigningFailure(str(exc)) from exc

    @classmethod
    def decode(cls, raw: str | None) -> SessionToken | None:
        """Return the session carried by *raw*, or None if it is absent or invalid."""
        if not raw:
            return None
        settings = get_settings()
        try:
            claims = jwt.decode(
                raw,
                settings.session_secret_key,
                algorithms=["HS256"],
                issuer=SESSION_ISSUER,
                options={"require": ["sub", "exp", "iss"]},
            )
            return cls(user_id=uuid.UUID(claims["sub"]))
        except (jwt.InvalidTokenError, ValueError):
            return None


async def _fetch_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    try:
        user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise SessionDeserializationFailure(str(exc)) from exc
    if user is None:
        raise SessionDeserializationFailure(f"user {user_id} no longer exists")
    return user


async def load_session_user(db: AsyncSession, raw: str | None) -> User | None:
    """Resolve a session cookie to its user; None means unauthenticated."""
    token = SessionToken.decode(raw)
    if token is None:
        return None
    try:
        return await _fetch_user(db, token.user_id)
    except SessionDeserializationFailure as exc:
        logger.info("Stale session ignored", reason=str(exc))
        return None


def set_session_cookie(response: Response, user_id: uuid.UUID) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        SessionToken(user_id).encode(),
        max_age=settings.session_max_age_days * 86400,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name)
