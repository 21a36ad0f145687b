"""Identity Repository - SQLAlchemy implementation of the IdentityStore protocol.

Invariants:
    - exists() is a read-only existence probe, never raises for unknown ids
    - resolve() raises NotFoundError for unknown ids
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.core.domain_types import IdentityId
from worktrack.core.errors import InternalError, NotFoundError
from worktrack.core.repository_protocols import Identity
from worktrack.models.identity import Identity as IdentityRow

logger = logging.getLogger(__name__)


def _to_domain(row: IdentityRow) -> Identity:
    return Identity(
        id=IdentityId(row.id), username=row.username,
        full_name=row.full_name, image_url=row.image_url,
    )


class SqlIdentityStore:
    """IdentityStore backed by the identities table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def exists(self, identity_id: IdentityId) -> bool:
        try:
            found = await self._db.scalar(
                select(IdentityRow.id).where(IdentityRow.id == identity_id),
            )
        except SQLAlchemyError as e:
            logger.error(f"identity lookup failed: {e}")
            raise InternalError(detail="identity lookup failed")
        return found is not None

    async def resolve(self, identity_id: IdentityId) -> Identity:
        try:
            row = await self._db.scalar(
                select(IdentityRow).where(IdentityRow.id == identity_id),
            )
        except SQLAlchemyError as e:
            logger.error(f"identity lookup failed: {e}")
            raise InternalError(detail="identity lookup failed")
        if row is None:
            raise NotFoundError("identity", str(identity_id))
        return _to_domain(row)

    async def list(self) -> list[Identity]:
        try:
            result = await self._db.execute(
                select(IdentityRow).order_by(IdentityRow.username),
            )
        except SQLAlchemyError as e:
            logger.error(f"identity list failed: {e}")
            raise InternalError(detail="identity list failed")
        return [_to_domain(r) for r in result.scalars().all()]
