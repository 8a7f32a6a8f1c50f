"""Exception handlers that render graph errors as ``{error, message, detail}``."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Type

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...models.hierarchy import HierarchyConfigError
from ...services.graph_builder import GraphConfigError
from ...services.graph_store import GraphInvariantError

logger = logging.getLogger(__name__)

# Error code and fallback message per HTTP status.
STATUS_ERRORS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("validation_error", "Invalid request payload"),
    status.HTTP_404_NOT_FOUND: ("not_found", "Resource not found"),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("method_not_allowed", "Method not allowed"),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("internal_error", "Internal server error"),
}

# Graph errors and the (status, error code) they map to.
GRAPH_ERRORS: Dict[Type[Exception], Tuple[int, str]] = {
    GraphConfigError: (status.HTTP_400_BAD_REQUEST, "config_error"),
    HierarchyConfigError: (status.HTTP_400_BAD_REQUEST, "config_error"),
    GraphInvariantError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "graph_invariant"),
}


def error_body(
    status_code: int,
    message: Optional[str] = None,
    *,
    error: Optional[str] = None,
    detail: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    default_error, default_message = STATUS_ERRORS.get(
        status_code, STATUS_ERRORS[status.HTTP_500_INTERNAL_SERVER_ERROR]
    )
    return {
        "error": error or default_error,
        "message": message or default_message,
        "detail": detail,
    }


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    body = error_body(status.HTTP_400_BAD_REQUEST, detail={"errors": exc.errors()})
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if isinstance(exc.detail, dict):
        body = error_body(
            exc.status_code,
            exc.detail.get("message"),
            error=exc.detail.get("error"),
            detail=exc.detail.get("detail"),
        )
    else:
        body = error_body(exc.status_code, exc.detail if isinstance(exc.detail, str) else None)
    return JSONResponse(status_code=exc.status_code, content=body)


async def graph_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code, error = next(
        (mapped for exc_type, mapped in GRAPH_ERRORS.items() if isinstance(exc, exc_type)),
        (status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"),
    )
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Graph invariant violated",
            extra={"path": request.url.path, "error": str(exc)},
        )
    else:
        logger.warning(
            "Rejected graph input",
            extra={"path": request.url.path, "error": str(exc)},
        )
    return JSONResponse(
        status_code=status_code, content=error_body(status_code, str(exc), error=error)
    )


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    body = error_body(status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the shared exception handlers to the FastAPI application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    for exc_type in GRAPH_ERRORS:
        app.add_exception_handler(exc_type, graph_exception_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = [
    "GRAPH_ERRORS",
    "error_body",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "graph_exception_handler",
    "internal_exception_handler",
]
