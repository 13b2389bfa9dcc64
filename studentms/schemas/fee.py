"""Schemas for student fees."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class FeeCreate(BaseModel):
    student_id: uuid.UUID
    description: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", pattern="^[A-Z]{3}$")
    due_date: date | None = None


class FeeUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1, max_length=255)
    amount: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    due_date: date | None = None


class FeePayment(BaseModel):
    payment_reference: str = Field(..., min_length=1, max_length=100)


class FeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    student_id: uuid.UUID
    description: str
    amount: Decimal
    currency: str
    due_date: date | None
    status: str
    paid_at: datetime | None
    payment_reference: str | None
    created_at: datetime
    updated_at: datetime
