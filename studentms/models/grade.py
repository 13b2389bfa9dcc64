"""Grade model: one score per student, course and assessment."""

from __future__ import annotations

import uuid

from sqlalchemy import Float, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from studentms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, uuid_fk


class Grade(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "grades"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", "assessment", name="uq_grade_student_course_assessment"
        ),
    )

    student_id: Mapped[uuid.UUID] = uuid_fk("students")
    course_id: Mapped[uuid.UUID] = uuid_fk("courses")

    # e.g. "midterm", "final", "quiz-3"
    assessment: Mapped[str] = mapped_column(String(100), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    max_score: Mapped[float] = mapped_column(Float, nullable=False, default=100.0)
    letter: Mapped[str | None] = mapped_column(String(5), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Grade {self.assessment!r} {self.score}/{self.max_score}>"
