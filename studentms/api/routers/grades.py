"""Grades router."""

from __future__ import annotations

import uuid

from fastapi import HTTPException, Query, status

from studentms.api.crud import build_crud_router
from studentms.models.course import Course
from studentms.models.grade import Grade
from studentms.models.student import Student
from studentms.schemas.coursework import GradeCreate, GradeOut, GradeUpdate


def _grade_filters(
    student_id: uuid.UUID | None = Query(None),
    course_id: uuid.UUID | None = Query(None),
) -> dict:
    return {"student_id": student_id, "course_id": course_id}


def _check_score(grade: Grade) -> None:
    if grade.score > grade.max_score:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="score cannot exceed max_score",
        )


router = build_crud_router(
    model=Grade,
    prefix="/grades",
    label="Grade",
    create_schema=GradeCreate,
    update_schema=GradeUpdate,
    out_schema=GradeOut,
    filters=_grade_filters,
    references={"student_id": Student, "course_id": Course},
    before_save=_check_score,
)
