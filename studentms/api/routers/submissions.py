"""Submissions router.

Students hand in work themselves, so creation is open to any active user
(restricted to their own student record); grading is staff-only.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.api.crud import build_crud_router, ensure_references, flush_or_409, get_or_404
from studentms.api.dependencies import get_current_active_user, get_db, require_staff
from studentms.core.logging import get_logger
from studentms.models.assignment import Assignment
from studentms.models.student import Student
from studentms.models.submission import Submission
from studentms.models.user import User
from studentms.schemas.coursework import (
    SubmissionCreate,
    SubmissionGrade,
    SubmissionOut,
    SubmissionUpdate,
)

logger = get_logger(__name__)

DbDep = Annotated[AsyncSession, Depends(get_db)]
CurrentUserDep = Annotated[User, Depends(get_current_active_user)]


def _submission_filters(
    assignment_id: uuid.UUID | None = Query(None),
    student_id: uuid.UUID | None = Query(None),
    status: str | None = Query(None),
) -> dict:
    return {"assignment_id": assignment_id, "student_id": student_id, "status": status}


router = build_crud_router(
    model=Submission,
    prefix="/submissions",
    label="Submission",
    create_schema=SubmissionCreate,
    update_schema=SubmissionUpdate,
    out_schema=SubmissionOut,
    filters=_submission_filters,
    order_by=Submission.submitted_at.desc(),
    with_create=False,
)


def _is_late(due: datetime | None, now: datetime) -> bool:
    if due is None:
        return False
    if due.tzinfo is None:
        # SQLite hands back naive datetimes; they are stored as UTC
        due = due.replace(tzinfo=timezone.utc)
    return now > due


@router.post("", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED)
async def create_submission(
    payload: SubmissionCreate, db: DbDep, current_user: CurrentUserDep
) -> Submission:
    await ensure_references(db, payload.model_dump(), {"student_id": Student})
    assignment = await db.get(Assignment, payload.assignment_id)
    if assignment is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Assignment {payload.assignment_id} does not exist",
        )

    if current_user.role == "student":
        student = await db.get(Student, payload.student_id)
        if student.user_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Students may only submit their own work",
            )

    now = datetime.now(timezone.utc)
    submission = Submission(
        **payload.model_dump(),
        submitted_at=now,
        status="late" if _is_late(assignment.due_date, now) else "submitted",
    )
    db.add(submission)
    await flush_or_409(db, "Submission")
    await db.refresh(submission)
    logger.info(
        "Submission received",
        assignment_id=str(payload.assignment_id),
        student_id=str(payload.student_id),
        status=submission.status,
    )
    return submission


@router.post(
    "/{submission_id}/grade",
    response_model=SubmissionOut,
    dependencies=[Depends(require_staff)],
)
async def grade_submission(
    submission_id: uuid.UUID, payload: SubmissionGrade, db: DbDep
) -> Submission:
    submission = await get_or_404(db, Submission, submission_id, "Submission")
    assignment = await db.get(Assignment, submission.assignment_id)
    if assignment is not None and payload.score > assignment.max_score:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"score cannot exceed the assignment maximum of {assignment.max_score}",
        )

    submission.score = payload.score
    submission.feedback = payload.feedback
    submission.status = "graded"
    await db.flush()
    await db.refresh(submission)
    return submission
