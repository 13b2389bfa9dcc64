"""User model: local accounts and Google-federated identities."""

from __future__ import annotations

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studentms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "users"

    # UNIQUE here is what keeps concurrent first-time Google logins from
    # creating two accounts for one address
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    hashed_password: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # "admin" | "teacher" | "student"
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="student")

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # "local" | "google"
    auth_provider: Mapped[str] = mapped_column(String(20), nullable=False, default="local")
    # Provider-assigned account id for federated users
    provider_sub: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<User {self.email!r} role={self.role!r} provider={self.auth_provider!r}>"
