"""Attendance model: daily presence record."""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from studentms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, uuid_fk


class Attendance(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", "attended_on", name="uq_attendance_student_course_day"
        ),
    )

    student_id: Mapped[uuid.UUID] = uuid_fk("students")
    # None = whole-day attendance
    course_id: Mapped[uuid.UUID | None] = uuid_fk("courses", nullable=True)

    attended_on: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # present | absent | late | excused
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="present")
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Attendance {self.attended_on} status={self.status!r}>"
