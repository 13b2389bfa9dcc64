"""Users router: local registration/login, token refresh, account self-service,
and admin management of accounts."""

# Annotations stay evaluated: login is wrapped by the rate limiter and FastAPI
# reads the signature through that wrapper.

import asyncio
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.api.dependencies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    get_current_active_user,
    get_db,
    require_admin,
    user_from_token,
)
from studentms.core.auth import TokenPair, hash_password, issue_token_pair, verify_password
from studentms.core.config import get_settings
from studentms.core.errors import SigningFailure
from studentms.core.limiter import limiter
from studentms.core.logging import get_logger
from studentms.core.sessions import clear_session_cookie
from studentms.models.user import User
from studentms.schemas.user import (
    AccountUpdate,
    PasswordChange,
    RefreshRequest,
    TokenOut,
    UserCreate,
    UserList,
    UserOut,
    UserRegister,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["users"])
logger = get_logger(__name__)

DbDep = Annotated[AsyncSession, Depends(get_db)]
AdminDep = Annotated[User, Depends(require_admin)]
CurrentUserDep = Annotated[User, Depends(get_current_active_user)]


def set_token_cookies(response: Response, tokens: TokenPair) -> None:
    settings = get_settings()
    response.set_cookie(
        ACCESS_COOKIE,
        tokens.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    response.set_cookie(
        REFRESH_COOKIE,
        tokens.refresh_token,
        max_age=settings.refresh_token_expire_days * 86400,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def _issue(user: User) -> TokenPair:
    try:
        return issue_token_pair(str(user.id))
    except SigningFailure:
        logger.error("Token signing failed", user_id=str(user.id))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not issue tokens",
        )


async def _ensure_unique(db: AsyncSession, email: str, username: str) -> None:
    existing = (await db.execute(
        select(User.id).where((User.email == email) | (User.username == username))
    )).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email or username already taken",
        )


# ── Authentication ────────────────────────────────────────────────────────────

@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister, db: DbDep) -> User:
    """Create a local student account (unverified until an admin confirms it)."""
    email = payload.email.lower()
    await _ensure_unique(db, email, payload.username)

    user = User(
        email=email,
        username=payload.username,
        full_name=payload.full_name,
        hashed_password=await asyncio.to_thread(hash_password, payload.password),
        role="student",
        is_verified=False,
        is_active=True,
        auth_provider="local",
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("User registered", email=email)
    return user


@router.post("/login", response_model=TokenOut)
@limiter.limit(get_settings().login_rate_limit)
async def login(
    request: Request,
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: DbDep,
) -> TokenOut:
    """Authenticate with email or username + password. Returns a token pair."""
    # The OAuth2 form calls it `username`; an email works too
    identifier = form_data.username.strip()
    result = await db.execute(
        select(User).where((User.email == identifier.lower()) | (User.username == identifier))
    )
    user = result.scalar_one_or_none()

    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not user or user.hashed_password is None:
        raise invalid
    if not await asyncio.to_thread(verify_password, form_data.password, user.hashed_password):
        raise invalid
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    tokens = _issue(user)
    set_token_cookies(response, tokens)
    logger.info("User logged in", user_id=str(user.id))
    return TokenOut(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=UserOut.model_validate(user),
    )


@router.post("/refresh-token", response_model=TokenOut)
async def refresh_token(
    request: Request,
    response: Response,
    db: DbDep,
    payload: RefreshRequest | None = None,
) -> TokenOut:
    """Trade a refresh token (body or cookie) for a fresh token pair."""
    token = (payload.refresh_token if payload else None) or request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token required"
        )

    user = await user_from_token(db, token)
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    tokens = _issue(user)
    set_token_cookies(response, tokens)
    return TokenOut(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=UserOut.model_validate(user),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """Drop token and session cookies; bearer tokens simply expire."""
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)
    clear_session_cookie(response)


# ── Self-service ──────────────────────────────────────────────────────────────

@router.get("/current-user", response_model=UserOut)
async def current_user(current_user: CurrentUserDep) -> User:
    return current_user


@router.patch("/update-account", response_model=UserOut)
async def update_account(payload: AccountUpdate, db: DbDep, current_user: CurrentUserDep) -> User:
    current_user.full_name = payload.full_name
    await db.flush()
    await db.refresh(current_user)
    return current_user


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(payload: PasswordChange, db: DbDep, current_user: CurrentUserDep) -> None:
    if current_user.hashed_password is None or not await asyncio.to_thread(
        verify_password, payload.old_password, current_user.hashed_password
    ):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Old password is incorrect")
    current_user.hashed_password = await asyncio.to_thread(hash_password, payload.new_password)
    await db.flush()
    logger.info("Password changed", user_id=str(current_user.id))


# ── Administration ────────────────────────────────────────────────────────────

@router.get("", response_model=UserList, dependencies=[Depends(require_admin)])
async def list_users(db: DbDep) -> UserList:
    total = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    result = await db.execute(select(User).order_by(User.created_at))
    return UserList(total=total, items=list(result.scalars().all()))


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_user(payload: UserCreate, db: DbDep) -> User:
    email = payload.email.lower()
    await _ensure_unique(db, email, payload.username)

    user = User(
        email=email,
        username=payload.username,
        full_name=payload.full_name,
        hashed_password=await asyncio.to_thread(hash_password, payload.password),
        role=payload.role,
        is_verified=True,
        is_active=True,
        auth_provider="local",
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("User created", email=email, role=payload.role)
    return user


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: uuid.UUID, db: DbDep, current_user: CurrentUserDep) -> User:
    if current_user.role != "admin" and current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=UserOut, dependencies=[Depends(require_admin)])
async def update_user(user_id: uuid.UUID, payload: UserUpdate, db: DbDep) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    data = payload.model_dump(exclude_unset=True)
    if "password" in data:
        user.hashed_password = await asyncio.to_thread(hash_password, data.pop("password"))
    for field, value in data.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: uuid.UUID, db: DbDep, current_user: AdminDep) -> None:
    if current_user.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    await db.delete(user)
    logger.info("User deleted", user_id=str(user_id))
