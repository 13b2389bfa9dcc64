"""Fee model: an amount billed to a student."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from studentms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, uuid_fk


class Fee(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "fees"

    student_id: Mapped[uuid.UUID] = uuid_fk("students")

    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # pending | paid
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Fee {self.amount} {self.currency} status={self.status!r}>"
