"""FastAPI dependency providers."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.core.auth import decode_token
from studentms.core.config import get_settings
from studentms.core.database import get_session_factory
from studentms.core.logging import bind_user
from studentms.core.oauth import GoogleOAuthClient
from studentms.core.sessions import load_session_user
from studentms.models.user import User

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"

# auto_error=False: cookie and session credentials are tried when no header is sent
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/users/login", auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for the duration of a request."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_google_client(request: Request) -> GoogleOAuthClient:
    """Return the application's Google OAuth client (built in create_app)."""
    return request.app.state.google_oauth


async def user_from_token(db: AsyncSession, token: str) -> User:
    """Decode a signed token and return the user named by its ``sub`` claim."""
    payload = decode_token(token)
    try:
        user_id = uuid.UUID(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: AsyncSession = Depends(get_db),
) -> User:
    """Authenticate by Bearer header, access-token cookie, then session cookie.

    A Bearer header is final. A stale or foreign access-token cookie falls
    through to the session cookie, whose own failure is then reported.
    """
    if token:
        return await user_from_token(db, token)

    cookie_error: HTTPException | None = None
    cookie_token = request.cookies.get(ACCESS_COOKIE)
    if cookie_token:
        try:
            return await user_from_token(db, cookie_token)
        except HTTPException as exc:
            cookie_error = exc

    session_cookie = request.cookies.get(get_settings().session_cookie_name)
    user = await load_session_user(db, session_cookie)
    if user is None:
        if cookie_error is not None:
            raise cookie_error
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Raise 403 if the account is disabled."""
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")
    bind_user(current_user.id)
    return current_user


async def require_staff(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Raise 403 unless the user is a teacher or an admin."""
    if current_user.role not in ("admin", "teacher"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff access required")
    return current_user


async def require_admin(
    current_user: User = Depends(get_current_active_user),
) -> User:
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return current_user
