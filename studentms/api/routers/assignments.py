"""Assignments router."""

from __future__ import annotations

import uuid

from fastapi import Query

from studentms.api.crud import build_crud_router
from studentms.models.assignment import Assignment
from studentms.models.course import Course
from studentms.schemas.coursework import AssignmentCreate, AssignmentOut, AssignmentUpdate


def _assignment_filters(course_id: uuid.UUID | None = Query(None)) -> dict:
    return {"course_id": course_id}


router = build_crud_router(
    model=Assignment,
    prefix="/assignments",
    label="Assignment",
    create_schema=AssignmentCreate,
    update_schema=AssignmentUpdate,
    out_schema=AssignmentOut,
    filters=_assignment_filters,
    references={"course_id": Course},
)
