"""Health & Readiness Probes - liveness and readiness endpoints.

Invariants:
    - GET /health/ answers 200 whenever the process is up (liveness)
    - GET /health/ready answers 503 until the database answers AND the schema
      registry has been published (readiness)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from worktrack import __version__
from worktrack.infrastructure import database
from worktrack.services import schema_catalog

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "worktrack-api", "version": __version__}


@router.get("/ready")
async def readiness_check():
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    try:
        registry = schema_catalog.get_schema_registry()
    except RuntimeError:
        return _not_ready("schema_registry_not_loaded")
    return {
        "status": "ready",
        "checks": {"database": "healthy", "workItemTypes": len(registry)},
    }


def _not_ready(reason: str) -> JSONResponse:
    logger.warning(f"Readiness check failed: {reason}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )
