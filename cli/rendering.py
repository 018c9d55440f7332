"""Utilities for rendering schema graphs in the CLI."""

from __future__ import annotations

from typing import Optional

from schema_graph.graph import GraphPayload, matching_edges
from schema_graph.graph.models import ABSTRACT, RELATED_ENTITY, RELATIONSHIP, SchemaNode


def render_tree(payload: GraphPayload, highlight: Optional[str] = None) -> str:
    """Render a schema graph as an ASCII tree rooted at the main entity.

    Args:
        payload: Graph produced by ``build_graph`` (positions are ignored).
        highlight: Optional property name; edges it matches are marked ``*``.

    Returns:
        String representation of the tree.
    """
    root = payload.main
    if root is None:
        return "Main entity not found in graph."

    node_map = {n.id: n for n in payload.nodes}
    marked = set(matching_edges(payload.edges, name=highlight)) if highlight else set()

    lines = [f"{_get_icon(root)} {root.data.label}  ({root.data.subtitle})"]
    children = [e for e in payload.edges if e.source == root.id]
    count = len(children)
    for i, edge in enumerate(children):
        child = node_map[edge.target]
        connector = "└── " if i == count - 1 else "├── "
        marker = "* " if edge.id in marked else ""
        suffix = ""
        if edge.metadata.cardinality and edge.metadata.cardinality != "one-to-one":
            suffix = f"  <{edge.metadata.cardinality}>"
        if child.data.is_ghost:
            suffix += "  (unresolved)"
        lines.append(
            f"{connector}{marker}[{edge.label}] {_get_icon(child)} {child.data.label}{suffix}"
        )

    return "\n".join(lines)


def render_properties(node: SchemaNode) -> str:
    """One line per property, indented by nesting depth."""
    lines = []
    for prop in node.data.properties:
        indent = "  " * prop.depth
        required = " *" if prop.required else ""
        lines.append(f"{indent}{prop.name}: {prop.type or 'any'}{required}")
    return "\n".join(lines)


def _get_icon(node: SchemaNode) -> str:
    if node.kind == ABSTRACT:
        return "🧩"
    if node.kind == RELATIONSHIP:
        return "🔗"
    if node.kind == RELATED_ENTITY:
        icons = {
            "master-data": "🏛️",
            "reference-data": "📚",
            "work-product-component": "📄",
        }
        return icons.get(node.data.category or "", "📦")
    return "📁"
