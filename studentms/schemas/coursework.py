"""Schemas for assignments, submissions and grades."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ── Assignments ──────────────────────────────────────────────────────────────

class AssignmentCreate(BaseModel):
    course_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    due_date: datetime | None = None
    max_score: float = Field(default=100.0, gt=0)


class AssignmentUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    due_date: datetime | None = None
    max_score: float | None = Field(default=None, gt=0)


class AssignmentOut(AssignmentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


# ── Submissions ──────────────────────────────────────────────────────────────

class SubmissionCreate(BaseModel):
    assignment_id: uuid.UUID
    student_id: uuid.UUID
    content: str | None = None
    attachment_url: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _not_empty(self) -> "SubmissionCreate":
        if not self.content and not self.attachment_url:
            raise ValueError("a submission needs content or an attachment_url")
        return self


class SubmissionUpdate(BaseModel):
    content: str | None = None
    attachment_url: str | None = Field(default=None, max_length=500)


class SubmissionGrade(BaseModel):
    score: float = Field(..., ge=0)
    feedback: str | None = None


class SubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    assignment_id: uuid.UUID
    student_id: uuid.UUID
    content: str | None
    attachment_url: str | None
    submitted_at: datetime
    status: str
    score: float | None
    feedback: str | None
    created_at: datetime
    updated_at: datetime


# ── Grades ───────────────────────────────────────────────────────────────────

class GradeCreate(BaseModel):
    student_id: uuid.UUID
    course_id: uuid.UUID
    assessment: str = Field(..., min_length=1, max_length=100)
    score: float = Field(..., ge=0)
    max_score: float = Field(default=100.0, gt=0)
    letter: str | None = Field(default=None, max_length=5)
    remarks: str | None = None

    @model_validator(mode="after")
    def _score_within_max(self) -> "GradeCreate":
        if self.score > self.max_score:
            raise ValueError("score cannot exceed max_score")
        return self


class GradeUpdate(BaseModel):
    score: float | None = Field(default=None, ge=0)
    max_score: float | None = Field(default=None, gt=0)
    letter: str | None = Field(default=None, max_length=5)
    remarks: str | None = None


class GradeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    student_id: uuid.UUID
    course_id: uuid.UUID
    assessment: str
    score: float
    max_score: float
    letter: str | None
    remarks: str | None
    created_at: datetime
    updated_at: datetime
