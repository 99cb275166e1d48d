"""Standard API response envelope and error -> status mapping.

Every response body has the shape
``{success, data, error: {code, message, details?}, metadata: {timestamp, version}}``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.errors import (
    AppError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from app.models.candidate import Candidate
from app.models.pagination import PaginatedResult

logger = logging.getLogger(__name__)

# (status code, error code) per error kind; first match wins
_ERROR_STATUS: list[tuple[type[AppError], int, str]] = [
    (ValidationError, 400, "VALIDATION_ERROR"),
    (NotFoundError, 404, "NOT_FOUND"),
    (ConflictError, 409, "CONFLICT"),
    (PreconditionFailedError, 412, "PRECONDITION_FAILED"),
    (DatabaseError, 500, "DATABASE_ERROR"),
]


def _metadata() -> dict[str, str]:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.API_VERSION,
    }


def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    """Wrap ``data`` in a successful envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "data": data,
            "error": None,
            "metadata": _metadata(),
        },
    )


def error_response(
    code: str,
    message: str,
    status_code: int = 500,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build an error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": error,
            "metadata": _metadata(),
        },
    )


def error_response_for(exc: Exception) -> JSONResponse:
    """Map an exception to its error envelope.

    ``DatabaseError`` and unexpected exceptions get a generic message so
    store internals never reach the caller.
    """
    for kind, status_code, code in _ERROR_STATUS:
        if not isinstance(exc, kind):
            continue
        if isinstance(exc, DatabaseError):
            logger.error(
                "database_error",
                extra={"error_message": exc.message, "cause": repr(exc.cause)},
            )
            return error_response(
                code, "An error occurred while processing your request", status_code
            )
        logger.warning(
            "request_failed",
            extra={"error_code": code, "error_message": exc.message},
        )
        details = {"field": exc.field} if isinstance(exc, ValidationError) else None
        return error_response(code, exc.message, status_code, details)

    logger.exception("unexpected_error")
    return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)


def serialize_candidate(candidate: Candidate) -> dict[str, Any]:
    """JSON-ready camelCase representation of a candidate."""
    return candidate.model_dump(mode="json", by_alias=True)


def serialize_page(result: PaginatedResult[Candidate]) -> dict[str, Any]:
    """JSON-ready page; ``totalCount`` falls back to the item count."""
    return {
        "items": [serialize_candidate(c) for c in result.items],
        "totalCount": (
            result.total_count if result.total_count is not None else len(result.items)
        ),
        "pageSize": result.page_size,
        "continuationToken": result.continuation_token,
        "hasMore": bool(result.continuation_token),
    }
