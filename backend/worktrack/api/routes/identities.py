"""Identities - read-only listing of users that relation fields may reference."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from worktrack.api.jsonapi import render_identity
from worktrack.core.domain_types import IdentityId
from worktrack.core.errors import NotFoundError
from worktrack.infrastructure.database import get_db
from worktrack.services.identity_repository import SqlIdentityStore

router = APIRouter(prefix="/api/v1/identities", tags=["identities"])


@router.get("")
async def list_identities(db: AsyncSession = Depends(get_db)):
    identities = await SqlIdentityStore(db).list()
    return {"data": [render_identity(i) for i in identities]}


@router.get("/{identity_id}")
async def show_identity(identity_id: str, db: AsyncSession = Depends(get_db)):
    try:
        parsed = IdentityId(UUID(identity_id))
    except ValueError:
        raise NotFoundError("identity", identity_id)
    return {"data": render_identity(await SqlIdentityStore(db).resolve(parsed))}
