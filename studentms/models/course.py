"""Course model."""

from __future__ import annotations

import uuid

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studentms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, uuid_fk


class Course(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "courses"

    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Teaching staff account
    teacher_id: Mapped[uuid.UUID | None] = uuid_fk("users", nullable=True, ondelete="SET NULL")

    def __repr__(self) -> str:
        return f"<Course {self.code!r}>"
