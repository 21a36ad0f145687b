"""Schema Catalog - process-wide SchemaRegistry snapshot, its loading and publication.

Invariants:
    - The published registry is replaced, never mutated; a request keeps the
      snapshot it was handed even if a new type is published meanwhile
    - Type creation is serialized in-process (asyncio.Lock) so two concurrent
      creations cannot drop each other's snapshot
    - A lookup miss reloads from the database once: types created by another
      process become visible without a restart

Design Decisions:
    - Module-level singleton like db_manager: initialized in the FastAPI lifespan,
      injected into routes through get_schema_registry()
"""

import asyncio
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.core.errors import BadParameterError
from worktrack.core.repository_protocols import WorkItemTypeStore
from worktrack.core.schema_registry import SchemaRegistry
from worktrack.core.work_item_type import WorkItemType, system_work_item_types
from worktrack.services.work_item_type_repository import SqlWorkItemTypeStore

logger = logging.getLogger(__name__)

_registry: SchemaRegistry | None = None
_publish_lock = asyncio.Lock()


def publish_registry(registry: SchemaRegistry) -> SchemaRegistry:
    global _registry
    _registry = registry
    return registry


def get_schema_registry() -> SchemaRegistry:
    """FastAPI dependency: current immutable registry snapshot."""
    if _registry is None:
        raise RuntimeError("Schema registry not initialized")
    return _registry


async def load_schema_registry(
    db: AsyncSession, seed_system_types: bool = True,
) -> SchemaRegistry:
    """Load every stored type (seeding missing system types) and publish the snapshot."""
    store: WorkItemTypeStore = SqlWorkItemTypeStore(db)
    types = await store.load_all()
    if seed_system_types:
        known = {t.name for t in types}
        for system_type in system_work_item_types():
            if system_type.name not in known:
                await store.insert(system_type)
                types.append(system_type)
                logger.info(
                    f"Seeded work item type {system_type.name}",
                    extra={"type_name": system_type.name},
                )
    registry = publish_registry(SchemaRegistry(types))
    logger.info(f"Schema registry loaded with {len(registry)} work item types")
    return registry


async def lookup_type(
    db: AsyncSession, registry: SchemaRegistry, type_name: str,
) -> WorkItemType:
    """Lookup with one reload from storage on a miss."""
    if type_name in registry:
        return registry.lookup(type_name)
    async with _publish_lock:
        reloaded = await load_schema_registry(db, seed_system_types=False)
    return reloaded.lookup(type_name)


async def create_work_item_type(
    db: AsyncSession, name: Any, fields: Any,
) -> WorkItemType:
    """Validate, persist and publish a new work item type."""
    if not isinstance(name, str) or not name.strip():
        raise BadParameterError("name", name, expected="a non-empty type name")
    work_item_type = WorkItemType.from_dict(name, fields)
    async with _publish_lock:
        current = get_schema_registry()
        if name in current:
            raise BadParameterError("name", name, expected="a unique type name")
        await SqlWorkItemTypeStore(db).insert(work_item_type)
        publish_registry(current.with_type(work_item_type))
    logger.info(f"Created work item type {name}", extra={"type_name": name})
    return work_item_type

