"""FastAPI application factory.

Lifespan
--------
On startup the app loads the schema catalog once - from ``SCHEMA_BASE_URL``
when set, otherwise from ``SCHEMA_DIR`` - and shares it across requests via
``request.app.state.catalog``.

Routers
-------
    /schemas   - catalog search and key resolution
    /graph     - laid-out entity-relationship graph for one schema
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schema_graph.api.routers import graph as graph_router
from schema_graph.api.routers import schemas as schemas_router
from schema_graph.catalog import SchemaCatalog, fetch_catalog, load_catalog
from schema_graph.config import settings

logger = logging.getLogger(__name__)


def _initial_catalog() -> SchemaCatalog:
    if settings.schema_base_url:
        return fetch_catalog(settings.schema_base_url)
    if settings.schema_dir.is_dir():
        return load_catalog(settings.schema_dir, settings.schema_public_prefix)
    logger.warning("Schema directory %s does not exist; starting with an empty catalog",
                   settings.schema_dir)
    return SchemaCatalog()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the catalog on startup."""
    app.state.catalog = _initial_catalog()
    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="OSDU Schema Graph API",
        description=(
            "Entity-relationship graphs for OSDU JSON Schemas: catalog search, "
            "schema resolution and laid-out node/edge graphs ready for rendering."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(schemas_router.router, prefix="/schemas", tags=["schemas"])
    app.include_router(graph_router.router, prefix="/graph", tags=["graph"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn schema_graph.api.app:app --reload
app = create_app()
