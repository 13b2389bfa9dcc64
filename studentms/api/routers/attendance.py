"""Attendance router."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import Query

from studentms.api.crud import build_crud_router
from studentms.models.attendance import Attendance
from studentms.models.course import Course
from studentms.models.student import Student
from studentms.schemas.academic import AttendanceCreate, AttendanceOut, AttendanceUpdate


def _attendance_filters(
    student_id: uuid.UUID | None = Query(None),
    course_id: uuid.UUID | None = Query(None),
    attended_on: date | None = Query(None),
    status: str | None = Query(None),
) -> dict:
    return {
        "student_id": student_id,
        "course_id": course_id,
        "attended_on": attended_on,
        "status": status,
    }


router = build_crud_router(
    model=Attendance,
    prefix="/attendance",
    label="Attendance record",
    create_schema=AttendanceCreate,
    update_schema=AttendanceUpdate,
    out_schema=AttendanceOut,
    filters=_attendance_filters,
    references={"student_id": Student, "course_id": Course},
    order_by=Attendance.attended_on.desc(),
)
