"""Timetable router."""

from __future__ import annotations

import uuid

from fastapi import HTTPException, Query, status

from studentms.api.crud import build_crud_router
from studentms.models.course import Course
from studentms.models.timetable import TimetableEntry
from studentms.schemas.academic import TimetableCreate, TimetableOut, TimetableUpdate


def _timetable_filters(
    course_id: uuid.UUID | None = Query(None),
    day_of_week: int | None = Query(None, ge=0, le=6),
    class_name: str | None = Query(None),
) -> dict:
    return {"course_id": course_id, "day_of_week": day_of_week, "class_name": class_name}


def _check_slot(entry: TimetableEntry) -> None:
    # A patch may move only one end of the slot
    if entry.start_time >= entry.end_time:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_time must be before end_time",
        )


router = build_crud_router(
    model=TimetableEntry,
    prefix="/timetable",
    label="Timetable entry",
    create_schema=TimetableCreate,
    update_schema=TimetableUpdate,
    out_schema=TimetableOut,
    filters=_timetable_filters,
    references={"course_id": Course},
    order_by=(TimetableEntry.day_of_week, TimetableEntry.start_time),
    before_save=_check_slot,
)
