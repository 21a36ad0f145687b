"""Work Item Types - list, show and create schemas.

Invariants:
    - Types are immutable once created; there is no update or delete route
    - Creation publishes a new registry snapshot; in-flight requests keep theirs
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.api.jsonapi import render_work_item_type
from worktrack.core.schema_registry import SchemaRegistry
from worktrack.infrastructure.database import get_db
from worktrack.schemas.work_item_type import CreateWorkItemTypePayload
from worktrack.services.schema_catalog import (
    create_work_item_type, get_schema_registry, lookup_type,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/workitemtypes", tags=["workitemtypes"])


@router.get("")
async def list_types(registry: SchemaRegistry = Depends(get_schema_registry)):
    return {"data": [render_work_item_type(t) for t in registry.types()]}


@router.get("/{type_name}")
async def show_type(
    type_name: str,
    db: AsyncSession = Depends(get_db),
    registry: SchemaRegistry = Depends(get_schema_registry),
):
    return {"data": render_work_item_type(await lookup_type(db, registry, type_name))}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_type(
    body: CreateWorkItemTypePayload, db: AsyncSession = Depends(get_db),
):
    work_item_type = await create_work_item_type(db, body.name, body.fields)
    return {"data": render_work_item_type(work_item_type)}
