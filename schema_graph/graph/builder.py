"""Schema -> node/edge graph extraction.

``build_graph`` is a pure function of ``(model, index, options)``: nodes are
deduplicated through a mapping that lives only for the duration of one call,
and the same input always yields the same ids in the same order.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from schema_graph.graph.models import (
    ABSTRACT,
    EDGE_CONNECTABLE,
    EDGE_ERD,
    EDGE_REF,
    EDGE_RELATIONSHIP,
    ENTITY,
    RELATED_ENTITY,
    RELATIONSHIP,
    SHAPE_DEFAULT,
    SHAPE_ERD,
    EdgeMetadata,
    ErdRelationship,
    GraphBuildOptions,
    GraphPayload,
    NodeData,
    PropertyInfo,
    Relation,
    SchemaEdge,
    SchemaModel,
    SchemaNode,
)
from schema_graph.graph.resolver import (
    infer_category,
    normalize_id,
    ref_label,
    resolve_entity,
    resolve_ref,
)
from schema_graph.graph.walker import (
    collect_from_schema,
    collect_properties,
    extract_erd_relationships,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _unique(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


def _filter_properties(props: list[PropertyInfo], needle: str) -> list[PropertyInfo]:
    if not needle:
        return props
    return [
        p for p in props
        if needle in p.name.lower() or needle in (p.description or "").lower()
    ]


def _filter_relations(relations: list[Relation], needle: str) -> list[Relation]:
    if not needle:
        return relations
    return [r for r in relations if needle in r.kind.lower() or needle in r.target.lower()]


def _edge_id(base: str, occurrences: dict[str, int]) -> str:
    """``base`` for the first edge, then ``base#2``, ``base#3``, ..."""
    count = occurrences.get(base, 0) + 1
    occurrences[base] = count
    return base if count == 1 else f"{base}#{count}"


def _main_node(
    model: SchemaModel,
    props: list[PropertyInfo],
    relations: list[Relation],
    erd: list[ErdRelationship],
    shape: str,
) -> SchemaNode:
    schema_id = model.schema.get("$id") if isinstance(model.schema, Mapping) else None
    return SchemaNode(
        id=normalize_id(model.id or model.title),
        kind=ENTITY,
        shape=shape,
        data=NodeData(
            label=model.title,
            subtitle=model.id,
            properties=props,
            relations=relations,
            erd_relationships=erd,
            file_path=model.path,
            schema_id=schema_id if isinstance(schema_id, str) else None,
        ),
    )


def _related_node(
    node_id: str,
    rel: ErdRelationship,
    index: Optional[Mapping[str, Any]],
) -> SchemaNode:
    found = resolve_entity(index, rel.target_entity, rel.group_type)
    if found is None:
        logger.debug("Unresolved related entity %r (ghost node)", rel.target_entity)
        data = NodeData(label=rel.target_entity, subtitle="Related Entity")
    else:
        data = NodeData(
            label=rel.target_entity,
            subtitle=found.schema_id or found.key,
            properties=collect_properties(found.schema),
            category=infer_category(found.key, found.schema_id),
            file_path=found.key,
            schema_id=found.schema_id,
        )
    return SchemaNode(id=node_id, kind=RELATED_ENTITY, shape=SHAPE_ERD, data=data)


def _ref_node(
    node_id: str,
    ref: str,
    index: Optional[Mapping[str, Any]],
    shape: str,
) -> SchemaNode:
    found = resolve_ref(index, ref)
    if found is None:
        logger.debug("Unresolved $ref %r (ghost node)", ref)
        data = NodeData(label=ref_label(ref), subtitle=ref)
    else:
        data = NodeData(
            label=ref_label(ref),
            subtitle=found.schema_id or found.key,
            properties=collect_properties(found.schema),
            file_path=found.key,
            schema_id=found.schema_id,
        )
    return SchemaNode(id=node_id, kind=ABSTRACT, shape=shape, data=data)


def _build_erd(
    model: SchemaModel,
    index: Optional[Mapping[str, Any]],
    props: list[PropertyInfo],
    relations: list[Relation],
    refs: list[str],
) -> tuple[dict[str, SchemaNode], list[SchemaEdge]]:
    erd = extract_erd_relationships(model.schema)
    main = _main_node(model, props, relations, erd, SHAPE_ERD)
    nodes: dict[str, SchemaNode] = {main.id: main}
    edges: list[SchemaEdge] = []
    occurrences: dict[str, int] = {}

    for rel in erd:
        if not rel.target_entity:
            continue
        entity_id = normalize_id(f"entity::{rel.target_entity}")
        if entity_id not in nodes:
            nodes[entity_id] = _related_node(entity_id, rel, index)
        label = (
            f"{rel.source_property} (connectable)" if rel.is_connectable else rel.source_property
        )
        edges.append(
            SchemaEdge(
                id=_edge_id(f"{main.id}->erd->{entity_id}", occurrences),
                source=main.id,
                target=entity_id,
                kind=EDGE_CONNECTABLE if rel.is_connectable else EDGE_ERD,
                label=label,
                metadata=EdgeMetadata(
                    source_property=rel.source_property,
                    relationship_type=rel.relationship_type,
                    cardinality=rel.cardinality,
                    is_connectable=rel.is_connectable,
                ),
            )
        )

    for ref in _unique(refs):
        ref_id = normalize_id(f"ref::{ref}")
        if ref_id not in nodes:
            nodes[ref_id] = _ref_node(ref_id, ref, index, SHAPE_ERD)
        edges.append(
            SchemaEdge(
                id=_edge_id(f"{main.id}->ref->{ref_id}", occurrences),
                source=main.id,
                target=ref_id,
                kind=EDGE_REF,
                label="extends",
            )
        )

    return nodes, edges


def _build_legacy(
    model: SchemaModel,
    index: Optional[Mapping[str, Any]],
    props: list[PropertyInfo],
    relations: list[Relation],
    all_relations: list[Relation],
) -> tuple[dict[str, SchemaNode], list[SchemaEdge]]:
    """One generic node per distinct relation kind, linked once from the main node."""
    main = _main_node(model, props, relations, [], SHAPE_DEFAULT)
    nodes: dict[str, SchemaNode] = {main.id: main}
    edges: list[SchemaEdge] = []
    occurrences: dict[str, int] = {}

    first_by_kind: dict[str, Relation] = {}
    for rel in all_relations:
        first_by_kind.setdefault(rel.kind, rel)

    for kind, rel in first_by_kind.items():
        if rel.relation_type == "ref":
            node_id = normalize_id(f"ref::{kind}")
            if node_id not in nodes:
                nodes[node_id] = _ref_node(node_id, kind, index, SHAPE_DEFAULT)
            edge_kind, label = EDGE_REF, "extends"
        else:
            node_id = normalize_id(f"rel::{kind}")
            if node_id not in nodes:
                nodes[node_id] = SchemaNode(
                    id=node_id,
                    kind=RELATIONSHIP,
                    shape=SHAPE_DEFAULT,
                    data=NodeData(label=kind, subtitle="relationship"),
                )
            edge_kind, label = EDGE_RELATIONSHIP, kind
        edges.append(
            SchemaEdge(
                id=_edge_id(f"{main.id}->rel->{node_id}", occurrences),
                source=main.id,
                target=node_id,
                kind=edge_kind,
                label=label,
            )
        )

    return nodes, edges


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_edges(nodes: Iterable[SchemaNode], edges: Iterable[SchemaEdge]) -> list[SchemaEdge]:
    """Drop edges whose source or target is not a node, and self loops."""
    node_ids = {n.id for n in nodes}
    valid: list[SchemaEdge] = []
    for edge in edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            logger.debug("Dropping dangling edge %s (%s -> %s)", edge.id, edge.source, edge.target)
            continue
        if edge.source == edge.target:
            logger.debug("Dropping self-loop edge %s", edge.id)
            continue
        valid.append(edge)
    return valid


def build_graph(
    model: SchemaModel,
    index: Optional[Mapping[str, Any]] = None,
    options: Optional[GraphBuildOptions] = None,
) -> GraphPayload:
    """Extract the entity-relationship graph of one schema.

    Args:
        model: The schema being visualised (becomes the single ``entity`` node).
        index: ``{key -> parsed schema}`` used to resolve ``$ref`` targets and
            relationship entities.  Missing targets become ghost nodes.
        options: ``erd_view`` (default ``True``) selects the clustered ERD
            shape; ``False`` produces the legacy one-node-per-relation-kind
            graph.  ``filter`` narrows the main node's property and relation
            lists without removing any node.

    Returns:
        A :class:`~schema_graph.graph.models.GraphPayload` with unique node
        ids and only edges whose endpoints exist.  Positions are unset.
    """
    options = options or GraphBuildOptions()
    needle = (options.filter or "").strip().lower()

    collected = collect_from_schema(model.schema)
    props = _filter_properties(collected.properties, needle)
    relations = _filter_relations(collected.relations, needle)

    if options.erd_view:
        nodes, edges = _build_erd(model, index, props, relations, collected.refs)
    else:
        nodes, edges = _build_legacy(model, index, props, relations, collected.relations)

    node_list = list(nodes.values())
    return GraphPayload(nodes=node_list, edges=validate_edges(node_list, edges))
