"""Work Items - list, show, create, update (PATCH) and delete.

Invariants:
    - Routes hold no business logic: VersionedEntityStore and list_work_items decide
    - Each request works against ONE schema registry snapshot
    - Paging input is lenient (bad offset -> 0, bad limit -> default, capped at max)
    - Domain errors propagate to the global WorkTrackError handler
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.api.jsonapi import render_page_links, render_work_item
from worktrack.config import Settings, get_settings
from worktrack.core.errors import BadParameterError
from worktrack.core.paging import normalize_paging
from worktrack.core.schema_registry import SchemaRegistry
from worktrack.infrastructure.database import get_db
from worktrack.schemas.work_item import CreateWorkItemPayload, UpdateWorkItemPayload
from worktrack.services.identity_repository import SqlIdentityStore
from worktrack.services.relation_resolver import RelationResolver
from worktrack.services.schema_catalog import get_schema_registry
from worktrack.services.versioned_store import VersionedEntityStore
from worktrack.services.work_item_listing import list_work_items
from worktrack.services.work_item_repository import SqlWorkItemStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/workitems", tags=["workitems"])


def get_entity_store(
    db: AsyncSession = Depends(get_db),
    registry: SchemaRegistry = Depends(get_schema_registry),
) -> VersionedEntityStore:
    return VersionedEntityStore(
        db, SqlWorkItemStore(db), registry,
        RelationResolver(SqlIdentityStore(db)),
    )


@router.get("")
async def list_items(
    request: Request,
    filter_: str | None = Query(None, alias="filter"),
    page_offset: str | None = Query(None, alias="page[offset]"),
    page_limit: int | None = Query(None, alias="page[limit]"),
    db: AsyncSession = Depends(get_db),
    store: VersionedEntityStore = Depends(get_entity_store),
    settings: Settings = Depends(get_settings),
):
    """List work items. prev/next only when such a page exists; first/last always."""
    offset, limit = normalize_paging(
        page_offset, page_limit,
        settings.page_size_default, settings.page_size_max,
    )
    page = await list_work_items(SqlWorkItemStore(db), filter_, offset, limit)
    return {
        "data": [
            render_work_item(request, item, await store.type_for(item))
            for item in page.items
        ],
        "links": render_page_links(request, page.links),
        "meta": {"totalCount": page.total_count},
    }


@router.get("/{work_item_id}")
async def show_item(
    work_item_id: str,
    request: Request,
    store: VersionedEntityStore = Depends(get_entity_store),
):
    work_item = await store.load(work_item_id)
    return {"data": render_work_item(request, work_item, await store.type_for(work_item))}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    body: CreateWorkItemPayload,
    request: Request,
    response: Response,
    store: VersionedEntityStore = Depends(get_entity_store),
):
    relationships = body.data.relationships
    if relationships.base_type is None:
        raise BadParameterError(
            "data.relationships.baseType", None, expected="a work item type",
        )
    work_item = await store.create(
        relationships.base_type.data.id,
        body.data.attributes,
        relationships.to_block(),
    )
    resource = render_work_item(request, work_item, await store.type_for(work_item))
    response.headers["Location"] = resource["links"]["self"]
    return {"data": resource}


@router.patch("/{work_item_id}")
async def update_item(
    work_item_id: str,
    body: UpdateWorkItemPayload,
    request: Request,
    store: VersionedEntityStore = Depends(get_entity_store),
):
    """PATCH semantics: only present attributes change; version is mandatory."""
    if body.data.id != work_item_id:
        raise BadParameterError("data.id", body.data.id, expected=work_item_id)
    relationships = body.data.relationships
    work_item = await store.save(
        work_item_id,
        body.data.attributes,
        relationships.to_block() if relationships else None,
    )
    resource = render_work_item(request, work_item, await store.type_for(work_item))
    return {"data": resource, "links": {"self": resource["links"]["self"]}}


@router.delete("/{work_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    work_item_id: str,
    store: VersionedEntityStore = Depends(get_entity_store),
):
    await store.delete(work_item_id)
