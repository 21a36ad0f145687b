"""Error Handlers - global exception handlers rendering JSON:API error documents.

Invariants:
    - WorkTrackError -> {"errors": [{status, code, title, detail}]} with its own status
    - RequestValidationError -> 400 bad_parameter, one error object per invalid field
    - Exception (catch-all) -> 500 internal_error, never leaks internal details
    - InternalError debug detail is logged, never rendered

Design Decisions:
    - Three-layer handler: domain (WorkTrackError), validation (Pydantic), catch-all (Exception)
    - Kept out of main.py so the app module only wires things together
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from worktrack.core.errors import ErrorSeverity, InternalError, WorkTrackError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_worktrack_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_worktrack_error_handler(app: FastAPI) -> None:

    @app.exception_handler(WorkTrackError)
    async def worktrack_error_handler(request: Request, exc: WorkTrackError):
        """Handle all worktrack domain/infrastructure errors."""
        log = logger.error if exc.severity is ErrorSeverity.CRITICAL else logger.info
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "debug_info": exc.context.debug_info,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "bad_parameter", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=InternalError("An unexpected error occurred").to_response(),
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """One JSON:API error object per invalid location."""
    return {
        "errors": [
            {
                "status": "400",
                "code": "bad_parameter",
                "title": "Bad parameter error",
                "detail": e["msg"],
                "source": {
                    "pointer": ".".join(str(loc) for loc in e["loc"]),
                },
            }
            for e in exc.errors()
        ],
    }
