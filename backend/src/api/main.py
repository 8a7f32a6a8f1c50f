"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .middleware import register_error_handlers
from .routes import graph
from ..services.config import get_config
from ..services.graph_service import get_graph_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup tasks."""
    config = get_config()
    logger.info(
        "Starting graph API",
        extra={
            "hierarchies": len(config.hierarchies),
            "index_notes": len(config.index_notes),
        },
    )
    get_graph_service()
    yield


app = FastAPI(
    title="Breadcrumbs Graph API",
    description="Typed note hierarchies with implied-edge inference and trail queries",
    version="0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(graph.router, tags=["graph"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "graph_version": get_graph_service().snapshot.version}


__all__ = ["app"]
