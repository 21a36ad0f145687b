"""Error Hierarchy - typed, categorized exceptions for all worktrack failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller errors (400-level) carry the offending parameter; infrastructure errors
      (500-level) never carry storage-engine detail in the user-facing message
    - to_response() produces a JSON:API error document

Design Decisions:
    - Single hierarchy with WorkTrackError base: one FastAPI handler catches all
    - Codes mirror the JSON:API error codes clients already match on
      (not_found, bad_parameter, version_conflict, internal_error)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logging, never rendered verbatim."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class WorkTrackError(Exception):
    """Base exception for all worktrack errors."""

    title = "Unknown error"

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_jsonapi_error(self) -> dict:
        """Single JSON:API error object."""
        return {
            "status": str(self.http_status),
            "code": self.code,
            "title": self.title,
            "detail": self.message,
        }

    def to_response(self) -> dict:
        """Convert to a JSON:API error document."""
        return {"errors": [self.to_jsonapi_error()]}


# --- Caller errors (400-level) -----------------------------------------------

class NotFoundError(WorkTrackError):
    """Entity does not exist, or its id cannot exist in the key space."""

    title = "Not found error"

    def __init__(
        self, entity: str, entity_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = str(entity_id)
        super().__init__(
            f"{entity} with id '{entity_id}' not found",
            "not_found", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.entity = entity
        self.entity_id = entity_id


class BadParameterError(WorkTrackError):
    """A parameter or attribute value was rejected."""

    title = "Bad parameter error"

    def __init__(
        self,
        parameter: str,
        value: Any,
        expected: Any = None,
        context: ErrorContext | None = None,
    ):
        message = f"Bad value for parameter '{parameter}': '{value}'"
        if expected is not None:
            message += f" (expected: '{expected}')"
        super().__init__(
            message, "bad_parameter", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.parameter = parameter
        self.value = value
        self.expected = expected


class VersionConflictError(WorkTrackError):
    """Claimed version is missing or differs from the stored version."""

    title = "Version conflict error"

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "version_conflict", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 400,
        )


# --- Infrastructure errors (500-level) ---------------------------------------

class InternalError(WorkTrackError):
    """Persistence or other failure unrelated to caller input.

    ``message`` is what the caller sees; ``detail`` is kept for the logs only.
    """

    title = "Internal error"

    def __init__(
        self,
        message: str = "An internal error occurred",
        detail: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        if detail:
            ctx.debug_info = {"detail": detail}
        super().__init__(
            message, "internal_error", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.detail = detail
