"""Clustered layout for ERD graphs.

The main entity sits at the origin.  Abstract (``$ref``) schemas form one or
two columns on its left; related entities form a grid on its right, most
connected first.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Sequence

from schema_graph.graph.models import (
    ABSTRACT,
    ENTITY,
    GraphPayload,
    Position,
    SchemaEdge,
    SchemaNode,
)
from schema_graph.layout.collision import resolve_collisions

CLUSTER_SPACING = 400.0
COLUMN_SPACING = 340.0
ROW_SPACING = 180.0
ABSTRACT_SPLIT_THRESHOLD = 10
MAX_GRID_COLUMNS = 3


def _degrees(edges: Sequence[SchemaEdge]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for e in edges:
        counts[e.source] = counts.get(e.source, 0) + 1
        counts[e.target] = counts.get(e.target, 0) + 1
    return counts


def _centered(row: int, rows: int) -> float:
    return (row - (rows - 1) / 2) * ROW_SPACING


def _place_abstract(nodes: list[SchemaNode], positions: dict[str, Position]) -> None:
    if not nodes:
        return
    columns = 2 if len(nodes) > ABSTRACT_SPLIT_THRESHOLD else 1
    per_column = math.ceil(len(nodes) / columns)
    for col in range(columns):
        chunk = nodes[col * per_column : (col + 1) * per_column]
        x = -CLUSTER_SPACING - col * COLUMN_SPACING
        for row, node in enumerate(chunk):
            positions[node.id] = Position(x=x, y=_centered(row, len(chunk)))


def _place_related(
    nodes: list[SchemaNode],
    edges: Sequence[SchemaEdge],
    positions: dict[str, Position],
) -> None:
    if not nodes:
        return
    degree = _degrees(edges)
    # sorted() is stable: equal degrees keep extraction order
    ranked = sorted(nodes, key=lambda n: -degree.get(n.id, 0))
    columns = min(MAX_GRID_COLUMNS, math.ceil(math.sqrt(len(ranked))))
    rows = math.ceil(len(ranked) / columns)
    for i, node in enumerate(ranked):
        row, col = divmod(i, columns)
        positions[node.id] = Position(
            x=CLUSTER_SPACING + col * COLUMN_SPACING,
            y=_centered(row, rows),
        )


def layout_erd(nodes: Sequence[SchemaNode], edges: Sequence[SchemaEdge]) -> GraphPayload:
    """Assign clustered positions, then run the collision pass.

    Edges are only used to rank related entities by degree.  The returned
    nodes keep the input order; edges are returned unchanged.
    """
    entities = [n for n in nodes if n.kind == ENTITY]
    anchor = entities[0] if entities else None
    abstract = [n for n in nodes if n.kind == ABSTRACT]
    # anything else (extra entities, unknown kinds) joins the related grid
    related = [n for n in nodes if n.kind != ABSTRACT and n is not anchor]

    positions: dict[str, Position] = {}
    if anchor is not None:
        positions[anchor.id] = Position(x=0.0, y=0.0)
    _place_abstract(abstract, positions)
    _place_related(related, edges, positions)

    placed = [replace(n, position=positions[n.id]) for n in nodes]
    placed = resolve_collisions(placed, anchor_id=anchor.id if anchor else None)
    return GraphPayload(nodes=placed, edges=list(edges))
