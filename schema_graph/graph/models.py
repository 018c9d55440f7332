"""Dataclass models for the schema graph.

These are plain Python objects produced by the extractor and consumed by the
layout engine.  ``to_dict`` gives the JSON shape handed to renderers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

# Node kinds
ENTITY = "entity"
RELATED_ENTITY = "related-entity"
ABSTRACT = "abstract"
RELATIONSHIP = "relationship"

# Node shapes (drive the bounding box used by layout)
SHAPE_ERD = "erd"
SHAPE_DEFAULT = "default"

# Edge kinds
EDGE_REF = "ref"
EDGE_RELATIONSHIP = "relationship"
EDGE_ERD = "erd-relationship"
EDGE_CONNECTABLE = "connectable"

# Related-entity categories, in inference priority order
CATEGORIES = ("master-data", "reference-data", "work-product-component")


@dataclass
class PropertyInfo:
    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    depth: int = 1


@dataclass
class Relation:
    """A generic relation found by the schema walk.

    ``relation_type`` is ``"ref"`` for ``$ref`` hits (``kind`` is the ref
    string) and ``"relationship"`` for ``x-osdu-relationship`` hits (``kind``
    is ``GroupType--EntityType``).
    """

    kind: str
    target: str
    relation_type: str
    source_property: str = ""


@dataclass
class ErdRelationship:
    source_property: str
    target_entity: str
    relationship_type: str = "references"
    cardinality: str = "one-to-one"
    is_connectable: bool = False
    group_type: Optional[str] = None


@dataclass
class Position:
    x: float
    y: float


@dataclass
class NodeData:
    label: str
    subtitle: str = ""
    properties: list[PropertyInfo] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
    erd_relationships: list[ErdRelationship] = field(default_factory=list)
    category: Optional[str] = None
    file_path: Optional[str] = None
    schema_id: Optional[str] = None

    @property
    def is_ghost(self) -> bool:
        """``True`` when the node's target could not be resolved."""
        return not self.properties and self.file_path is None


@dataclass
class SchemaNode:
    id: str
    kind: str
    data: NodeData
    shape: str = SHAPE_ERD
    position: Optional[Position] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EdgeMetadata:
    source_property: Optional[str] = None
    relationship_type: Optional[str] = None
    cardinality: Optional[str] = None
    is_connectable: bool = False


@dataclass
class SchemaEdge:
    id: str
    source: str
    target: str
    kind: str
    label: str = ""
    metadata: EdgeMetadata = field(default_factory=EdgeMetadata)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class GraphBuildOptions:
    erd_view: bool = True
    filter: Optional[str] = None


@dataclass
class GraphPayload:
    nodes: list[SchemaNode] = field(default_factory=list)
    edges: list[SchemaEdge] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------
    def node(self, node_id: str) -> Optional[SchemaNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    @property
    def main(self) -> Optional[SchemaNode]:
        """The single ``entity`` node, if present."""
        for n in self.nodes:
            if n.kind == ENTITY:
                return n
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class SchemaModel:
    """One schema document as selected for visualisation."""

    id: str
    title: str
    schema: dict[str, Any]
    path: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def from_schema(
        cls,
        schema: dict[str, Any],
        path: Optional[str] = None,
        version: Optional[str] = None,
    ) -> SchemaModel:
        """Build a model using ``$id``/``title`` with the path as fallback."""
        schema_id = schema.get("$id") if isinstance(schema.get("$id"), str) else None
        title = schema.get("title") if isinstance(schema.get("title"), str) else None
        ident = schema_id or path or title or "schema"
        return cls(id=ident, title=title or ident, schema=schema, path=path, version=version)
