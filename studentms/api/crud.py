"""Router builder for the uniform academic record endpoints.

Each resource gets list / get / create / patch / delete. Resource modules
pass a ``filters`` dependency whose query parameters narrow the list, and a
``references`` map of foreign-key fields to the models they must exist in.
"""

# No postponed annotations here: the endpoint signatures below are built from
# the schema classes passed in, and FastAPI must see the real objects.

import uuid
from collections.abc import Callable, Mapping
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.api.dependencies import get_db, require_staff
from studentms.core.logging import get_logger
from studentms.models.base import Base
from studentms.schemas.common import Page

logger = get_logger(__name__)


def no_filters() -> dict[str, Any]:
    return {}


async def get_or_404(db: AsyncSession, model: type[Base], obj_id: uuid.UUID, label: str):
    obj = await db.get(model, obj_id)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return obj


async def ensure_references(
    db: AsyncSession, data: Mapping[str, Any], references: Mapping[str, type[Base]]
) -> None:
    """Raise 422 when a referenced row named in *data* does not exist."""
    for field, model in references.items():
        value = data.get(field)
        if value is not None and await db.get(model, value) is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{model.__name__} {value} does not exist",
            )


async def flush_or_409(db: AsyncSession, label: str) -> None:
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{label} conflicts with an existing record",
        )


def build_crud_router(
    *,
    model: type[Base],
    prefix: str,
    label: str,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    out_schema: type[BaseModel],
    filters: Callable[..., dict[str, Any]] = no_filters,
    references: Mapping[str, type[Base]] | None = None,
    order_by: Any = None,
    with_create: bool = True,
    before_save: Callable[[Any], None] | None = None,
) -> APIRouter:
    """Build the router for *model*.

    *before_save* runs on the ORM object after a create or patch has been
    applied and may raise HTTPException to veto the write.
    """
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])
    references = dict(references or {})
    order = order_by if order_by is not None else model.created_at.desc()
    if not isinstance(order, (tuple, list)):
        order = (order,)
    page_schema = Page[out_schema]
    staff_only = [Depends(require_staff)]

    @router.get("", response_model=page_schema)
    async def list_items(
        db: AsyncSession = Depends(get_db),
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=500),
        criteria: dict = Depends(filters),
    ):
        conditions = [
            getattr(model, name) == value for name, value in criteria.items() if value is not None
        ]
        total = (
            await db.execute(select(func.count()).select_from(model).where(*conditions))
        ).scalar_one()
        result = await db.execute(
            select(model).where(*conditions).order_by(*order).offset(skip).limit(limit)
        )
        return {"total": total, "items": list(result.scalars().all())}

    @router.get("/{item_id}", response_model=out_schema)
    async def get_item(item_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
        return await get_or_404(db, model, item_id, label)

    if with_create:

        @router.post(
            "",
            response_model=out_schema,
            status_code=status.HTTP_201_CREATED,
            dependencies=staff_only,
        )
        async def create_item(payload: create_schema, db: AsyncSession = Depends(get_db)):
            data = payload.model_dump()
            await ensure_references(db, data, references)
            obj = model(**data)
            if before_save is not None:
                before_save(obj)
            db.add(obj)
            await flush_or_409(db, label)
            await db.refresh(obj)
            logger.info(f"{label} created", id=str(obj.id))
            return obj

    @router.patch("/{item_id}", response_model=out_schema, dependencies=staff_only)
    async def update_item(
        item_id: uuid.UUID, payload: update_schema, db: AsyncSession = Depends(get_db)
    ):
        obj = await get_or_404(db, model, item_id, label)
        data = payload.model_dump(exclude_unset=True)
        await ensure_references(db, data, references)
        for field, value in data.items():
            setattr(obj, field, value)
        if before_save is not None:
            before_save(obj)
        await flush_or_409(db, label)
        await db.refresh(obj)
        return obj

    @router.delete(
        "/{item_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=staff_only
    )
    async def delete_item(item_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> None:
        obj = await get_or_404(db, model, item_id, label)
        await db.delete(obj)
        logger.info(f"{label} deleted", id=str(item_id))

    return router
