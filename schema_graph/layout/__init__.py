"""Layout engine package.

Usage::

    from schema_graph.layout import layout_graph
    laid_out = layout_graph(payload.nodes, payload.edges)
"""

from __future__ import annotations

from typing import Sequence

from schema_graph.graph.models import SHAPE_ERD, GraphPayload, SchemaEdge, SchemaNode
from schema_graph.layout.collision import find_overlaps, node_size, resolve_collisions
from schema_graph.layout.erd import layout_erd
from schema_graph.layout.layered import layout_layered


def layout_graph(nodes: Sequence[SchemaNode], edges: Sequence[SchemaEdge]) -> GraphPayload:
    """Position every node; ERD-shaped graphs get the clustered layout."""
    if any(n.shape == SHAPE_ERD for n in nodes):
        return layout_erd(nodes, edges)
    return layout_layered(nodes, edges)


__all__ = [
    "layout_graph",
    "layout_erd",
    "layout_layered",
    "resolve_collisions",
    "find_overlaps",
    "node_size",
]
