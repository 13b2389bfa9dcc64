"""Schemas for students, courses, timetable slots and attendance."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

_ATTENDANCE_STATUS = "^(present|absent|late|excused)$"


# ── Students ─────────────────────────────────────────────────────────────────

class StudentBase(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    roll_number: str = Field(..., min_length=1, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    class_name: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    enrollment_date: date | None = None
    guardian_name: str | None = None
    address: str | None = None
    user_id: uuid.UUID | None = None


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    roll_number: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    class_name: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    enrollment_date: date | None = None
    guardian_name: str | None = None
    address: str | None = None
    user_id: uuid.UUID | None = None
    is_active: bool | None = None


class StudentOut(StudentBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ── Courses ──────────────────────────────────────────────────────────────────

class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=30)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    credits: int = Field(default=0, ge=0, le=60)
    teacher_id: uuid.UUID | None = None


class CourseUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=30)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    credits: int | None = Field(default=None, ge=0, le=60)
    teacher_id: uuid.UUID | None = None


class CourseOut(CourseCreate):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


# ── Timetable ────────────────────────────────────────────────────────────────

class TimetableCreate(BaseModel):
    course_id: uuid.UUID
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Monday")
    start_time: time
    end_time: time
    room: str | None = Field(default=None, max_length=50)
    class_name: str | None = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def _check_slot(self) -> "TimetableCreate":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class TimetableUpdate(BaseModel):
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: time | None = None
    end_time: time | None = None
    room: str | None = Field(default=None, max_length=50)
    class_name: str | None = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def _check_slot(self) -> "TimetableUpdate":
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class TimetableOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    course_id: uuid.UUID
    day_of_week: int
    start_time: time
    end_time: time
    room: str | None
    class_name: str | None
    created_at: datetime
    updated_at: datetime


# ── Attendance ───────────────────────────────────────────────────────────────

class AttendanceCreate(BaseModel):
    student_id: uuid.UUID
    course_id: uuid.UUID | None = None
    attended_on: date
    status: str = Field(default="present", pattern=_ATTENDANCE_STATUS)
    remarks: str | None = None


class AttendanceUpdate(BaseModel):
    status: str | None = Field(default=None, pattern=_ATTENDANCE_STATUS)
    remarks: str | None = None


class AttendanceOut(AttendanceCreate):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
