"""Fees router."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.api.crud import build_crud_router, get_or_404
from studentms.api.dependencies import get_db, require_staff
from studentms.core.logging import get_logger
from studentms.models.fee import Fee
from studentms.models.student import Student
from studentms.schemas.fee import FeeCreate, FeeOut, FeePayment, FeeUpdate

logger = get_logger(__name__)

DbDep = Annotated[AsyncSession, Depends(get_db)]


def _fee_filters(
    student_id: uuid.UUID | None = Query(None),
    status: str | None = Query(None, pattern="^(pending|paid)$"),
) -> dict:
    return {"student_id": student_id, "status": status}


router = build_crud_router(
    model=Fee,
    prefix="/fees",
    label="Fee",
    create_schema=FeeCreate,
    update_schema=FeeUpdate,
    out_schema=FeeOut,
    filters=_fee_filters,
    references={"student_id": Student},
)


@router.post("/{fee_id}/pay", response_model=FeeOut, dependencies=[Depends(require_staff)])
async def pay_fee(fee_id: uuid.UUID, payload: FeePayment, db: DbDep) -> Fee:
    fee = await get_or_404(db, Fee, fee_id, "Fee")
    if fee.status == "paid":
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Fee is already paid")

    fee.status = "paid"
    fee.paid_at = datetime.now(timezone.utc)
    fee.payment_reference = payload.payment_reference
    await db.flush()
    await db.refresh(fee)
    logger.info("Fee paid", fee_id=str(fee_id), reference=payload.payment_reference)
    return fee
