"""Extract-then-layout composition shared by the CLI and the API."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from schema_graph.graph import GraphBuildOptions, GraphPayload, SchemaModel, build_graph
from schema_graph.layout import layout_graph


def render_graph(
    model: SchemaModel,
    index: Optional[Mapping[str, Any]] = None,
    options: Optional[GraphBuildOptions] = None,
    layout: bool = True,
) -> GraphPayload:
    """Build the graph for *model* and, unless *layout* is off, position it."""
    payload = build_graph(model, index, options)
    if not layout:
        return payload
    return layout_graph(payload.nodes, payload.edges)
