"""Graph endpoint.

Routes
------
GET    /graph    Laid-out graph for one schema
                 (?schema=<key>&erd=true&filter=&layout=true&highlight=)
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from schema_graph.graph import GraphBuildOptions, matching_edges
from schema_graph.pipeline import render_graph

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class PropertyResponse(BaseModel):
    name: str
    type: Optional[str]
    description: Optional[str]
    required: bool
    depth: int


class RelationResponse(BaseModel):
    kind: str
    target: str
    relation_type: str
    source_property: str


class ErdRelationshipResponse(BaseModel):
    source_property: str
    target_entity: str
    relationship_type: str
    cardinality: str
    is_connectable: bool
    group_type: Optional[str]


class NodeDataResponse(BaseModel):
    label: str
    subtitle: str
    properties: list[PropertyResponse]
    relations: list[RelationResponse]
    erd_relationships: list[ErdRelationshipResponse]
    category: Optional[str]
    file_path: Optional[str]
    schema_id: Optional[str]


class PositionResponse(BaseModel):
    x: float
    y: float


class NodeResponse(BaseModel):
    id: str
    kind: str
    shape: str
    data: NodeDataResponse
    position: Optional[PositionResponse]


class EdgeMetadataResponse(BaseModel):
    source_property: Optional[str]
    relationship_type: Optional[str]
    cardinality: Optional[str]
    is_connectable: bool


class EdgeResponse(BaseModel):
    id: str
    source: str
    target: str
    kind: str
    label: str
    metadata: EdgeMetadataResponse


class GraphResponse(BaseModel):
    nodes: list[NodeResponse]
    edges: list[EdgeResponse]
    highlighted: list[str] = []


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=GraphResponse)
def schema_graph(
    schema: str,
    request: Request,
    erd: bool = True,
    filter: Optional[str] = None,
    layout: bool = True,
    highlight: Optional[str] = None,
) -> dict[str, Any]:
    """Return the entity-relationship graph of the schema selected by ``schema``."""
    catalog = request.app.state.catalog
    model = catalog.select(schema)
    if model is None:
        raise HTTPException(status_code=404, detail=f"Schema not found: {schema!r}")

    payload = render_graph(
        model,
        catalog.index,
        GraphBuildOptions(erd_view=erd, filter=filter),
        layout=layout,
    )
    body = payload.to_dict()
    body["highlighted"] = matching_edges(payload.edges, name=highlight) if highlight else []
    return body
