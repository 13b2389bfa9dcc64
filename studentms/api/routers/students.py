"""Students router."""

from __future__ import annotations

from fastapi import Query

from studentms.api.crud import build_crud_router
from studentms.models.student import Student
from studentms.models.user import User
from studentms.schemas.academic import StudentCreate, StudentOut, StudentUpdate


def _student_filters(
    class_name: str | None = Query(None),
    is_active: bool | None = Query(None),
) -> dict:
    return {"class_name": class_name, "is_active": is_active}


router = build_crud_router(
    model=Student,
    prefix="/students",
    label="Student",
    create_schema=StudentCreate,
    update_schema=StudentUpdate,
    out_schema=StudentOut,
    filters=_student_filters,
    references={"user_id": User},
    order_by=Student.roll_number,
)
