"""FastAPI middleware for error handling."""

from .error_handlers import (
    GRAPH_ERRORS,
    error_body,
    graph_exception_handler,
    http_exception_handler,
    internal_exception_handler,
    register_error_handlers,
    validation_exception_handler,
)

__all__ = [
    "GRAPH_ERRORS",
    "error_body",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "graph_exception_handler",
    "internal_exception_handler",
]
