"""Google identity → local user resolution.

A provider profile is matched to a User by email. Unknown emails get an
account provisioned on the spot: verified, username taken from the email
local-part, and a bcrypt hash of a placeholder password derived from the
profile so the account can also be used with the local login form.

At most one account exists per email. The UNIQUE constraint on
``users.email`` decides concurrent first logins: the losing INSERT rolls
back and re-reads the row the winner committed. Two new accounts racing for
the same bare username fall back to the id-suffixed one.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.core.auth import TokenPair, hash_password, issue_token_pair
from studentms.core.config import get_settings
from studentms.core.errors import AuthenticationFailure, StoreFailure
from studentms.core.logging import get_logger
from studentms.models.user import User

logger = get_logger(__name__)

NAME_SUFFIX_LEN = 2
ID_SUFFIX_LEN = 6


@dataclass(frozen=True)
class ProviderProfile:
    """The subset of an identity-provider profile used to match or create a user."""

    id: str
    name: str
    email: str


@dataclass(frozen=True)
class FederatedLogin:
    user: User
    tokens: TokenPair
    created: bool = False


def _tail(value: str, length: int) -> str:
    # Strings shorter than length are used whole
    return value[-length:] if len(value) > length else value


def placeholder_password(profile: ProviderProfile) -> str:
    return _tail(profile.name or "", NAME_SUFFIX_LEN) + _tail(profile.id, ID_SUFFIX_LEN)


def username_for(email: str) -> str:
    return email.split("@", 1)[0]


async def _find_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


def _suffixed_username(profile: ProviderProfile) -> str:
    return f"{username_for(profile.email)}-{_tail(profile.id, ID_SUFFIX_LEN)}"


async def _username_candidates(db: AsyncSession, profile: ProviderProfile) -> list[str]:
    """Usernames to try in order: the bare local-part if free, then the suffixed one."""
    username = username_for(profile.email)
    taken = (
        await db.execute(select(User.id).where(User.username == username))
    ).scalar_one_or_none()
    if taken is None:
        return [username, _suffixed_username(profile)]
    return [_suffixed_username(profile)]


async def _insert(db: AsyncSession, user: User) -> bool:
    """Flush and commit *user*; False when a UNIQUE constraint rejected it."""
    db.add(user)
    try:
        await db.flush()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return False
    return True


async def _provision(db: AsyncSession, profile: ProviderProfile) -> tuple[User, bool]:
    """Insert a user for *profile*, or return the row a concurrent login committed.

    A rejected insert is either the same email committed by another login
    (that row is returned) or another new account taking the same bare
    username, in which case the id-suffixed username is tried once.
    """
    settings = get_settings()
    hashed = await asyncio.to_thread(
        hash_password, placeholder_password(profile), settings.bcrypt_rounds
    )
    for username in await _username_candidates(db, profile):
        user = User(
            full_name=profile.name or None,
            email=profile.email,
            username=username,
            hashed_password=hashed,
            is_verified=True,
            role=settings.google_default_role,
            is_active=True,
            auth_provider="google",
            provider_sub=profile.id,
        )
        if await _insert(db, user):
            logger.info("Federated user provisioned", email=profile.email, username=username)
            return user, True

        existing = await _find_by_email(db, profile.email)
        if existing is not None:
            logger.info("Concurrent first login resolved", email=profile.email)
            return existing, False
        logger.info("Username taken concurrently", email=profile.email, username=username)

    raise StoreFailure(f"could not create account for {profile.email}")


async def resolve_federated_user(db: AsyncSession, profile: ProviderProfile) -> FederatedLogin:
    """Resolve *profile* to a local user and issue it a token pair.

    Raises AuthenticationFailure for a disabled account, StoreFailure when
    the directory cannot be read or written and SigningFailure when tokens
    cannot be signed.
    """
    try:
        user = await _find_by_email(db, profile.email)
        created = False
        if user is None:
            user, created = await _provision(db, profile)
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StoreFailure(str(exc)) from exc

    if not user.is_active:
        raise AuthenticationFailure(f"account {profile.email} is disabled")

    tokens = issue_token_pair(str(user.id))
    return FederatedLogin(user=user, tokens=tokens, created=created)
