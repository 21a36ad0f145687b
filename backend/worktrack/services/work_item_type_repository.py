"""Work Item Type Repository - SQLAlchemy implementation of the WorkItemTypeStore protocol.

Invariants:
    - Stored definitions are re-validated through WorkItemType.from_dict on load
    - insert() of an existing name raises BadParameterError (names are unique)
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.core.errors import BadParameterError, InternalError
from worktrack.core.work_item_type import WorkItemType
from worktrack.models.work_item_type import WorkItemType as WorkItemTypeRow

logger = logging.getLogger(__name__)


class SqlWorkItemTypeStore:
    """WorkItemTypeStore backed by the work_item_types table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def load_all(self) -> list[WorkItemType]:
        try:
            result = await self._db.execute(
                select(WorkItemTypeRow).order_by(WorkItemTypeRow.name),
            )
        except SQLAlchemyError as e:
            logger.error(f"work item type load failed: {e}")
            raise InternalError(detail="work item type load failed")
        return [
            WorkItemType.from_dict(row.name, row.fields)
            for row in result.scalars().all()
        ]

    async def insert(self, work_item_type: WorkItemType) -> None:
        definition = work_item_type.to_dict()
        self._db.add(WorkItemTypeRow(
            name=work_item_type.name, fields=definition["fields"],
        ))
        try:
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            raise BadParameterError(
                "name", work_item_type.name, expected="a unique type name",
            )
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"work item type insert failed: {e}")
            raise InternalError(detail="work item type insert failed")
