"""Versioned Entity Store - optimistic-concurrency create/update/show/delete of work items.

Invariants:
    - save() walks Requested -> Loaded -> Validated -> Persisted, or stops at
      Rejected (NotFound / BadParameter) or Conflict (VersionConflict)
    - An unparsable id is NotFound, not a format error
    - A missing version is VersionConflict; a non-integer version is BadParameter
    - The type governing conversion is the STORED type, never one named by the payload
    - The new record starts from the stored fields (PATCH): absent keys keep their value
    - Every conversion happens before the write; a rejected save writes nothing
    - version advances by exactly 1 per committed save, via one atomic
      conditional replace on (id, stored version); no lock, no retry

Design Decisions:
    - An assignee given as an attribute goes through the relation resolver like a
      relationship; the relationship block wins when both are given
"""

import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.core.domain_types import (
    FieldKind, VERSION_ATTRIBUTE, parse_work_item_id,
)
from worktrack.core.errors import (
    BadParameterError, NotFoundError, VersionConflictError,
)
from worktrack.core.field_types import ConversionError, convert_simple
from worktrack.core.repository_protocols import ReplaceOutcome, WorkItemStore
from worktrack.core.schema_registry import SchemaRegistry
from worktrack.core.work_item_type import WorkItem, WorkItemType
from worktrack.core.relationships import RelationshipBlock
from worktrack.services.relation_resolver import RelationResolver, move_assignee_attribute
from worktrack.services import schema_catalog

logger = logging.getLogger(__name__)


def claimed_version(attributes: Mapping[str, Any]) -> int:
    """Extract the mandatory claimed version from an attribute bag."""
    if VERSION_ATTRIBUTE not in attributes:
        raise VersionConflictError("version is mandatory")
    raw = attributes[VERSION_ATTRIBUTE]
    try:
        version = convert_simple(FieldKind.INTEGER, raw)
    except ConversionError:
        version = None
    if version is None or version < 0:
        raise BadParameterError(VERSION_ATTRIBUTE, raw)
    return version


class VersionedEntityStore:
    """Work item mutations over a WorkItemStore, a registry snapshot and a resolver."""

    def __init__(
        self,
        db: AsyncSession,
        items: WorkItemStore,
        registry: SchemaRegistry,
        resolver: RelationResolver,
    ):
        self._db = db
        self._items = items
        self._registry = registry
        self._resolver = resolver

    async def _type_of(self, type_name: str) -> WorkItemType:
        return await schema_catalog.lookup_type(self._db, self._registry, type_name)

    async def load(self, raw_id: str) -> WorkItem:
        work_item_id = parse_work_item_id(raw_id)
        if work_item_id is None:
            raise NotFoundError("work item", raw_id)
        stored = await self._items.get(work_item_id)
        if stored is None:
            raise NotFoundError("work item", raw_id)
        return stored

    async def save(
        self,
        raw_id: str,
        attributes: Mapping[str, Any],
        relationships: RelationshipBlock | None = None,
    ) -> WorkItem:
        """Apply a partial update if the claimed version matches the stored one."""
        stored = await self.load(raw_id)

        version = claimed_version(attributes)
        if version != stored.version:
            logger.info(
                f"Version conflict on work item {stored.id}: "
                f"claimed {version}, stored {stored.version}",
                extra={"work_item_id": stored.id, "version": stored.version},
            )
            raise VersionConflictError("version conflict")

        try:
            work_item_type = await self._type_of(stored.type)
        except NotFoundError:
            # stored items always reference a created type; reaching this means corrupt data
            raise BadParameterError("type", stored.type)

        attributes, relationships = move_assignee_attribute(attributes, relationships)
        fields = dict(stored.fields)
        fields.update(work_item_type.convert_attributes(attributes))
        fields.update(await self._resolver.resolve(relationships, work_item_type))

        new_record = WorkItem(
            id=stored.id, type=stored.type,
            version=stored.version + 1, fields=fields,
        )
        outcome = await self._items.conditional_replace(
            stored.id, stored.version, new_record,
        )
        if outcome is ReplaceOutcome.NOT_FOUND:
            raise NotFoundError("work item", raw_id)
        if outcome is ReplaceOutcome.VERSION_MISMATCH:
            raise VersionConflictError("version conflict")

        logger.info(
            f"Updated work item {new_record.id} to version {new_record.version}",
            extra={"work_item_id": new_record.id, "version": new_record.version},
        )
        return new_record

    async def create(
        self,
        type_name: str,
        attributes: Mapping[str, Any],
        relationships: RelationshipBlock | None = None,
    ) -> WorkItem:
        """Create a work item at version 0; every required field must be supplied."""
        try:
            work_item_type = await self._type_of(type_name)
        except NotFoundError:
            raise BadParameterError("data.relationships.baseType.data.id", type_name)

        attributes, relationships = move_assignee_attribute(attributes, relationships)
        fields = work_item_type.convert_attributes(attributes)
        fields.update(await self._resolver.resolve(relationships, work_item_type))
        missing = work_item_type.missing_required(fields)
        if missing:
            raise BadParameterError(missing[0], None, expected="a value")

        created = await self._items.insert(type_name, fields)
        logger.info(
            f"Created work item {created.id} of type {type_name}",
            extra={"work_item_id": created.id, "type_name": type_name},
        )
        return created

    async def delete(self, raw_id: str) -> None:
        work_item_id = parse_work_item_id(raw_id)
        if work_item_id is None or not await self._items.delete(work_item_id):
            raise NotFoundError("work item", raw_id)
        logger.info(
            f"Deleted work item {work_item_id}",
            extra={"work_item_id": work_item_id},
        )

    async def type_for(self, work_item: WorkItem) -> WorkItemType:
        """Type used to render an item already validated against it."""
        return await self._type_of(work_item.type)
