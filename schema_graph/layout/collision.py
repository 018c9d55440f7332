"""Pairwise bounding-box collision resolution.

Positions are top-left corners; a node's box size depends on its shape.
The pass is bounded: dense graphs may keep small residual overlaps once the
iteration cap is hit, which callers accept as degraded output.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Optional, Sequence

from schema_graph.graph.models import SHAPE_DEFAULT, SHAPE_ERD, Position, SchemaNode

logger = logging.getLogger(__name__)

NODE_SIZES: dict[str, tuple[float, float]] = {
    SHAPE_ERD: (280.0, 120.0),
    SHAPE_DEFAULT: (240.0, 80.0),
}
MAX_ITERATIONS = 8
PADDING = 20.0


def node_size(node: SchemaNode) -> tuple[float, float]:
    """``(width, height)`` of *node*'s box."""
    return NODE_SIZES.get(node.shape, NODE_SIZES[SHAPE_DEFAULT])


def _origin(node: SchemaNode) -> tuple[float, float]:
    if node.position is None:
        return 0.0, 0.0
    return node.position.x, node.position.y


def find_overlaps(nodes: Sequence[SchemaNode], padding: float = 0.0) -> list[tuple[str, str]]:
    """Return id pairs whose boxes (grown by *padding*) overlap on both axes."""
    found: list[tuple[str, str]] = []
    for i, a in enumerate(nodes):
        ax, ay = _origin(a)
        aw, ah = node_size(a)
        for b in nodes[i + 1 :]:
            bx, by = _origin(b)
            bw, bh = node_size(b)
            if (
                ax < bx + bw + padding
                and bx < ax + aw + padding
                and ay < by + bh + padding
                and by < ay + ah + padding
            ):
                found.append((a.id, b.id))
    return found


def resolve_collisions(
    nodes: Sequence[SchemaNode],
    anchor_id: Optional[str] = None,
    max_iterations: int = MAX_ITERATIONS,
    padding: float = PADDING,
) -> list[SchemaNode]:
    """Push overlapping nodes apart and return re-positioned copies.

    For each overlapping pair the required separation is measured along the
    vector between the box centres; each node moves half of it, except that
    the anchor never moves and its partner takes the full distance.  Stops
    early once an iteration moves nothing.
    """
    coords = [list(_origin(n)) for n in nodes]
    sizes = [node_size(n) for n in nodes]

    moved = False
    for iteration in range(max_iterations):
        moved = False
        for i in range(len(nodes)):
            for j in range(i + 1, len(nodes)):
                (aw, ah), (bw, bh) = sizes[i], sizes[j]
                dx = (coords[j][0] + bw / 2) - (coords[i][0] + aw / 2)
                dy = (coords[j][1] + bh / 2) - (coords[i][1] + ah / 2)
                need_x = (aw + bw) / 2 + padding - abs(dx)
                need_y = (ah + bh) / 2 + padding - abs(dy)
                if need_x <= 0 or need_y <= 0:
                    continue

                dist = math.hypot(dx, dy)
                ux, uy = (1.0, 0.0) if dist == 0 else (dx / dist, dy / dist)
                shifts = []
                if abs(ux) > 1e-9:
                    shifts.append(need_x / abs(ux))
                if abs(uy) > 1e-9:
                    shifts.append(need_y / abs(uy))
                shift = min(shifts) + 1.0

                if nodes[i].id == anchor_id:
                    coords[j][0] += ux * shift
                    coords[j][1] += uy * shift
                elif nodes[j].id == anchor_id:
                    coords[i][0] -= ux * shift
                    coords[i][1] -= uy * shift
                else:
                    coords[i][0] -= ux * shift / 2
                    coords[i][1] -= uy * shift / 2
                    coords[j][0] += ux * shift / 2
                    coords[j][1] += uy * shift / 2
                moved = True
        if not moved:
            logger.debug("Collision pass settled after %d iteration(s)", iteration + 1)
            break

    placed = [replace(n, position=Position(x=c[0], y=c[1])) for n, c in zip(nodes, coords)]
    if moved:
        remaining = find_overlaps(placed)
        if remaining:
            logger.debug("Collision pass hit the iteration cap with %d overlap(s)", len(remaining))
    return placed
