"""Top-to-bottom layered layout for the legacy (non-ERD) graph.

Strategy:
    1. Build an ``nx.DiGraph`` in node order and drop the closing edge of
       each cycle ``nx.find_cycle`` reports until the graph is a DAG.
    2. Rank every node by longest path from a source, walking a
       topological sort that breaks ties by node order.
    3. Order each rank with alternating barycentre sweeps to reduce
       crossings.
    4. Centre each rank horizontally around ``x = 0`` with fixed node and
       rank separation, then run the collision pass.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Sequence

import networkx as nx

from schema_graph.graph.models import ENTITY, GraphPayload, Position, SchemaEdge, SchemaNode
from schema_graph.layout.collision import node_size, resolve_collisions

logger = logging.getLogger(__name__)

RANK_SEPARATION = 80.0
NODE_SEPARATION = 40.0
ORDERING_SWEEPS = 4


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _acyclic_graph(order: list[str], edges: Sequence[SchemaEdge]) -> nx.DiGraph:
    """Directed graph over *order* with parallel edges, self loops and back edges removed."""
    graph = nx.DiGraph()
    graph.add_nodes_from(order)
    for e in edges:
        if e.source in graph and e.target in graph and e.source != e.target:
            graph.add_edge(e.source, e.target)

    while not nx.is_directed_acyclic_graph(graph):
        cycle = nx.find_cycle(graph, source=order)
        source, target = cycle[-1][:2]
        logger.debug("Ignoring back edge %s -> %s for ranking", source, target)
        graph.remove_edge(source, target)
    return graph


def _ranks(order: list[str], dag: nx.DiGraph) -> dict[str, int]:
    position = {n: i for i, n in enumerate(order)}
    rank = {n: 0 for n in order}
    for node in nx.lexicographical_topological_sort(dag, key=position.__getitem__):
        for nxt in dag.successors(node):
            rank[nxt] = max(rank[nxt], rank[node] + 1)
    return rank


def _barycentre_sort(
    layer: list[str],
    neighbours: Callable[[str], Iterable[str]],
    reference: list[str],
) -> list[str]:
    index = {n: i for i, n in enumerate(reference)}
    current = {n: i for i, n in enumerate(layer)}

    def key(node: str) -> float:
        linked = [index[m] for m in neighbours(node) if m in index]
        if not linked:
            return float(current[node])
        return sum(linked) / len(linked)

    return sorted(layer, key=key)


def _order_layers(layers: list[list[str]], dag: nx.DiGraph) -> list[list[str]]:
    for _ in range(ORDERING_SWEEPS):
        for r in range(1, len(layers)):
            layers[r] = _barycentre_sort(layers[r], dag.predecessors, layers[r - 1])
        for r in range(len(layers) - 2, -1, -1):
            layers[r] = _barycentre_sort(layers[r], dag.successors, layers[r + 1])
    return layers


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def layout_layered(nodes: Sequence[SchemaNode], edges: Sequence[SchemaEdge]) -> GraphPayload:
    """Assign layered positions (top-to-bottom), then run the collision pass."""
    by_id = {n.id: n for n in nodes}
    order = list(by_id)
    dag = _acyclic_graph(order, edges)
    rank = _ranks(order, dag)

    depth = max(rank.values(), default=-1) + 1
    layers: list[list[str]] = [[] for _ in range(depth)]
    for node_id in order:
        layers[rank[node_id]].append(node_id)
    layers = _order_layers(layers, dag)

    positions: dict[str, Position] = {}
    y = 0.0
    for layer in layers:
        sizes = [node_size(by_id[n]) for n in layer]
        total = sum(w for w, _ in sizes) + NODE_SEPARATION * (len(layer) - 1)
        x = -total / 2
        layer_height = max((h for _, h in sizes), default=0.0)
        for node_id, (w, h) in zip(layer, sizes):
            # centre vertically within the rank band
            positions[node_id] = Position(x=x, y=y + (layer_height - h) / 2)
            x += w + NODE_SEPARATION
        y += layer_height + RANK_SEPARATION

    anchor = next((n.id for n in nodes if n.kind == ENTITY), None)
    placed = [replace(n, position=positions[n.id]) for n in nodes]
    placed = resolve_collisions(placed, anchor_id=anchor)
    return GraphPayload(nodes=placed, edges=list(edges))
