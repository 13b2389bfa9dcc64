"""Courses router."""

from __future__ import annotations

import uuid

from fastapi import Query

from studentms.api.crud import build_crud_router
from studentms.models.course import Course
from studentms.models.user import User
from studentms.schemas.academic import CourseCreate, CourseOut, CourseUpdate


def _course_filters(teacher_id: uuid.UUID | None = Query(None)) -> dict:
    return {"teacher_id": teacher_id}


router = build_crud_router(
    model=Course,
    prefix="/courses",
    label="Course",
    create_schema=CourseCreate,
    update_schema=CourseUpdate,
    out_schema=CourseOut,
    filters=_course_filters,
    references={"teacher_id": User},
    order_by=Course.code,
)
