"""Catalog endpoints.

Routes
------
GET    /schemas            List schemas (optional ?q= search term)
GET    /schemas/resolve    Resolve an id, title or path to one schema (?key=)
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from schema_graph.graph.models import SchemaModel

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class SchemaSummary(BaseModel):
    id: str
    title: str
    path: Optional[str]
    version: Optional[str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _summary(model: SchemaModel) -> dict[str, Any]:
    return {
        "id": model.id,
        "title": model.title,
        "path": model.path,
        "version": model.version,
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=list[SchemaSummary])
def list_schemas(request: Request, q: Optional[str] = None) -> list[dict[str, Any]]:
    """Return every schema, optionally filtered by title/id/version."""
    catalog = request.app.state.catalog
    return [_summary(m) for m in catalog.search(q)]


@router.get("/resolve", response_model=SchemaSummary)
def resolve(key: str, request: Request) -> dict[str, Any]:
    """Resolve an id, partial id, title or file path to a single schema."""
    model = request.app.state.catalog.select(key)
    if model is None:
        raise HTTPException(status_code=404, detail=f"Schema not found: {key!r}")
    return _summary(model)
