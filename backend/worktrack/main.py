"""WorkTrack API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map WorkTrackError -> JSON:API error documents
    - CORS configured from settings (not hardcoded)
    - Database initialized and schema registry published on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The registry is loaded before the first request is served; a request never
      sees an uninitialized registry
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from worktrack import __version__
from worktrack.api.error_handlers import register_error_handlers
from worktrack.api.routes import health, identities, work_item_types, work_items
from worktrack.config import get_settings
from worktrack.infrastructure.database import init_db
from worktrack.infrastructure.observability import setup_logging
from worktrack.services.schema_catalog import load_schema_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    async with manager.session() as db:
        await load_schema_registry(db, seed_system_types=settings.seed_system_types)
    logger.info("WorkTrack API started")
    yield
    logger.info("WorkTrack API shutting down")
    await manager.dispose()


app = FastAPI(title="WorkTrack API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(work_items.router)
app.include_router(work_item_types.router)
app.include_router(identities.router)

register_error_handlers(app)
