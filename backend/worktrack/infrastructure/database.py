"""Database Session Manager - async engine, per-request sessions and a readiness probe.

Invariants:
    - A session that exits with an exception is rolled back before it closes
    - SQLAlchemy exceptions escaping a session surface as InternalError; the
      engine's message goes to the log, never to the caller
    - Pool sizing and pre-ping apply to server databases only (SQLite has no pool)

Design Decisions:
    - Module singleton db_manager created by init_db in the FastAPI lifespan
    - expire_on_commit=False: stored rows stay readable after the commit that wrote them
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from worktrack.core.errors import InternalError

logger = logging.getLogger(__name__)

# Most specific first; the first matching class names the failure
_FAILURE_DETAILS = (
    (IntegrityError, "Integrity constraint violated"),
    (OperationalError, "Connection or operational error"),
    (DBAPIError, "Database driver error"),
    (SQLAlchemyError, "Database operation failed"),
)


def _failure_detail(exc: SQLAlchemyError) -> str:
    for exc_type, detail in _FAILURE_DETAILS:
        if isinstance(exc, exc_type):
            return detail
    return "Database operation failed"


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


class DatabaseSessionManager:
    """Owns the async engine and hands out sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url, **_engine_options(database_url, pool_size, max_overflow),
        )
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            detail = _failure_detail(e)
            logger.error(f"{detail}: {e}")
            raise InternalError(detail=detail)
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when a trivial query round-trips (readiness probe)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
