"""Service test fixtures - async DB, published schema registry + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The schema registry is loaded (system types seeded) from that database and
      restored after the test
    - get_db dependency overridden to use test DB sessions
    - db_manager patched so the readiness probe hits the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (JSON field predicates compile to json_extract on SQLite)
    - StaticPool: every session shares the single in-memory connection
    - ASGITransport does not run the lifespan, so fixtures do its work
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from worktrack.core.domain_types import SYSTEM_STATE, SYSTEM_TITLE
from worktrack.core.work_item_type import SYSTEM_USER_STORY
from worktrack.db.base import Base
from worktrack.infrastructure.database import get_db, DatabaseSessionManager
import worktrack.infrastructure.database as db_module
from worktrack.models.identity import Identity as IdentityModel
from worktrack.services import schema_catalog
from worktrack.services.work_item_repository import SqlWorkItemStore
from worktrack.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def registry(test_db):
    """Seed system types and publish the registry, as the lifespan does."""
    original = schema_catalog._registry
    loaded = await schema_catalog.load_schema_registry(test_db)
    yield loaded
    schema_catalog._registry = original


@pytest.fixture
async def client(test_engine, test_session_factory, registry):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_identity(test_db):
    """Insert one identity directly into the test DB."""
    identity = IdentityModel(
        id=uuid.uuid4(), username="jdoe", full_name="J. Doe",
        image_url="https://example.com/jdoe.png",
    )
    test_db.add(identity)
    await test_db.commit()
    return identity


@pytest.fixture
async def seed_work_item(test_db, registry):
    """A system.userstory at version 0 with title and state set."""
    return await SqlWorkItemStore(test_db).insert(
        SYSTEM_USER_STORY, {SYSTEM_TITLE: "Initial title", SYSTEM_STATE: "new"},
    )
