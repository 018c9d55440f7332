"""Which edges a hovered property should highlight.

Renderers call :func:`matching_edges` from their own hover callback; there is
no shared event channel between components.
"""

from __future__ import annotations

from typing import Iterable, Optional

from schema_graph.graph.models import SchemaEdge


def matching_edges(
    edges: Iterable[SchemaEdge],
    name: Optional[str] = None,
    ref: Optional[str] = None,
) -> list[str]:
    """Return ids of edges matching a hovered property.

    An edge matches when its source property or label contains *name*
    (case-insensitive), or when its source, target or id contains *ref*.
    """
    needle = (name or "").lower()
    matched: list[str] = []
    for edge in edges:
        source_property = (edge.metadata.source_property or "").lower()
        by_name = bool(needle) and (needle in source_property or needle in edge.label.lower())
        by_ref = bool(ref) and (ref in edge.source or ref in edge.target or ref in edge.id)
        if by_name or by_ref:
            matched.append(edge.id)
    return matched
