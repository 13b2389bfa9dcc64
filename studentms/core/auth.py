"""Authentication helpers: password hashing and JWT management.

Local flow:
    1. POST /api/v1/users/login (OAuth2 form) → verify password → token pair
    2. Protected endpoints accept Authorization: Bearer <access token>
    3. POST /api/v1/users/refresh-token exchanges a refresh token for a new pair

Google flow ends in the same place: core.federation resolves the user and
calls issue_token_pair().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from fastapi import HTTPException, status

from studentms.core.config import get_settings
from studentms.core.errors import SigningFailure


# ── Password helpers ─────────────────────────────────────────────────────────

def hash_password(plain: str, rounds: int | None = None) -> str:
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds)).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed hash in the store
        return False


# ── JWT helpers ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _sign(subject: str, lifetime: timedelta, now: datetime) -> str:
    settings = get_settings()
    if not settings.jwt_secret_key:
        raise SigningFailure("JWT secret key is not configured")
    payload = {"sub": subject, "iat": now, "exp": now + lifetime}
    try:
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as exc:
        raise SigningFailure(str(exc)) from exc


def create_access_token(user_id: str, now: datetime | None = None) -> str:
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    return _sign(user_id, timedelta(minutes=settings.access_token_expire_minutes), now)


def create_refresh_token(user_id: str, now: datetime | None = None) -> str:
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    return _sign(user_id, timedelta(days=settings.refresh_token_expire_days), now)


def issue_token_pair(user_id: str) -> TokenPair:
    """Sign an access and a refresh token for *user_id* from the same instant."""
    now = datetime.now(timezone.utc)
    return TokenPair(
        access_token=create_access_token(user_id, now),
        refresh_token=create_refresh_token(user_id, now),
    )


def decode_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
