"""Work Item Repository - SQLAlchemy implementation of the WorkItemStore protocol.

Invariants:
    - conditional_replace is ONE statement: UPDATE ... WHERE id = :id AND version = :expected
    - Zero affected rows is disambiguated into NOT_FOUND vs VERSION_MISMATCH by a re-read
    - Every SQLAlchemyError is rolled back and raised as InternalError (no engine detail leaks)
    - Each mutating method commits its own unit of work
    - Reads repopulate identity-mapped rows: the conditional UPDATE bypasses the session

Design Decisions:
    - The atomic conditional write lives in storage, not in an in-process lock, so it
      holds across server processes sharing one database
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.core.domain_types import WorkItemId
from worktrack.core.errors import InternalError
from worktrack.core.repository_protocols import ReplaceOutcome
from worktrack.core.simple_filter import FilterExpression
from worktrack.core.work_item_type import WorkItem
from worktrack.models.work_item import WorkItem as WorkItemRow

logger = logging.getLogger(__name__)


def _to_domain(row: WorkItemRow) -> WorkItem:
    return WorkItem(
        id=WorkItemId(row.id), type=row.type,
        version=row.version, fields=dict(row.fields or {}),
    )


def _field_equals(field_name: str, value: Any):
    """SQL predicate: stored JSON field equals a scalar."""
    element = WorkItemRow.fields[field_name]
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    return element.as_string() == str(value)


class SqlWorkItemStore:
    """WorkItemStore backed by the work_items table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    @asynccontextmanager
    async def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"work item {operation} failed: {e}")
            raise InternalError(detail=f"work item {operation} failed")

    async def get(self, work_item_id: WorkItemId) -> WorkItem | None:
        async with self._guard("load"):
            result = await self._db.execute(
                select(WorkItemRow)
                .where(WorkItemRow.id == work_item_id)
                .execution_options(populate_existing=True),
            )
            row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def conditional_replace(
        self, work_item_id: WorkItemId, expected_version: int, new_record: WorkItem,
    ) -> ReplaceOutcome:
        async with self._guard("update"):
            result = await self._db.execute(
                update(WorkItemRow)
                .where(WorkItemRow.id == work_item_id)
                .where(WorkItemRow.version == expected_version)
                .values(
                    version=new_record.version,
                    fields=dict(new_record.fields),
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False),
            )
            if result.rowcount == 1:
                await self._db.commit()
                return ReplaceOutcome.COMMITTED
            await self._db.rollback()
            exists = await self._db.execute(
                select(WorkItemRow.id).where(WorkItemRow.id == work_item_id),
            )
        if exists.scalar_one_or_none() is None:
            return ReplaceOutcome.NOT_FOUND
        return ReplaceOutcome.VERSION_MISMATCH

    async def insert(self, type_name: str, fields: Mapping[str, Any]) -> WorkItem:
        async with self._guard("create"):
            row = WorkItemRow(type=type_name, version=0, fields=dict(fields))
            self._db.add(row)
            await self._db.commit()
            await self._db.refresh(row)
        return _to_domain(row)

    async def delete(self, work_item_id: WorkItemId) -> bool:
        async with self._guard("delete"):
            result = await self._db.execute(
                delete(WorkItemRow).where(WorkItemRow.id == work_item_id),
            )
            await self._db.commit()
        return result.rowcount > 0

    async def count_and_fetch(
        self, expression: FilterExpression, offset: int, limit: int,
    ) -> tuple[list[WorkItem], int]:
        conditions = []
        if expression.type_name is not None:
            conditions.append(WorkItemRow.type == expression.type_name)
        for field_name, value in expression.field_equals.items():
            conditions.append(_field_equals(field_name, value))

        async with self._guard("list"):
            total = await self._db.scalar(
                select(func.count()).select_from(WorkItemRow).where(*conditions),
            )
            result = await self._db.execute(
                select(WorkItemRow)
                .where(*conditions)
                .order_by(WorkItemRow.id)
                .offset(offset)
                .limit(limit)
                .execution_options(populate_existing=True),
            )
            rows = result.scalars().all()
        return [_to_domain(r) for r in rows], int(total or 0)
