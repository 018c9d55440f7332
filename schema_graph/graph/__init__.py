"""Graph extraction package.

Public re-exports so callers can write::

    from schema_graph.graph import build_graph, GraphBuildOptions
"""

from schema_graph.graph.builder import build_graph, validate_edges
from schema_graph.graph.highlight import matching_edges
from schema_graph.graph.models import (
    GraphBuildOptions,
    GraphPayload,
    SchemaEdge,
    SchemaModel,
    SchemaNode,
)

__all__ = [
    "build_graph",
    "validate_edges",
    "matching_edges",
    "GraphBuildOptions",
    "GraphPayload",
    "SchemaEdge",
    "SchemaModel",
    "SchemaNode",
]
