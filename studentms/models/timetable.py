"""TimetableEntry model: a weekly recurring class slot."""

from __future__ import annotations

import uuid
from datetime import time

from sqlalchemy import Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from studentms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, uuid_fk


class TimetableEntry(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "timetable_entries"

    course_id: Mapped[uuid.UUID] = uuid_fk("courses")

    # 0 = Monday … 6 = Sunday
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    class_name: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<TimetableEntry day={self.day_of_week} {self.start_time}-{self.end_time}>"
