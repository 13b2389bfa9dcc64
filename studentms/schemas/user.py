"""Schemas for User and Auth resources."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

_ROLE_PATTERN = "^(admin|teacher|student)$"


class UserRegister(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=2, max_length=100, pattern=r"^[A-Za-z0-9_.\-]+$")
    password: str = Field(..., min_length=8)
    full_name: str | None = None


class UserCreate(UserRegister):
    """Admin-side creation may pick the role."""

    role: str = Field(default="student", pattern=_ROLE_PATTERN)


class UserUpdate(BaseModel):
    full_name: str | None = None
    is_active: bool | None = None
    is_verified: bool | None = None
    role: str | None = Field(default=None, pattern=_ROLE_PATTERN)
    password: str | None = Field(default=None, min_length=8)


class AccountUpdate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)


class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=8)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    username: str
    full_name: str | None
    role: str
    is_active: bool
    is_verified: bool
    auth_provider: str
    created_at: datetime
    updated_at: datetime


class UserList(BaseModel):
    total: int
    items: list[UserOut]


class RefreshRequest(BaseModel):
    # Optional: falls back to the refresh_token cookie
    refresh_token: str | None = None


class TokenOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserOut
