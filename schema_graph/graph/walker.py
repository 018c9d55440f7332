"""Recursive walks over OSDU JSON Schema documents.

Two walks share one traversal shape:

* the *generic* walk collects property entries, ``$ref`` targets and
  ``x-osdu-relationship`` hits;
* the *ERD* walk collects typed business relationships.

Both descend into ``properties`` (adding a path segment), and into
``allOf`` / ``anyOf`` / ``oneOf`` and ``items`` (keeping the current path).
Anything that is not a mapping is a leaf, so malformed fragments never raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

from schema_graph.graph.models import ErdRelationship, PropertyInfo, Relation

RELATIONSHIP_KEY = "x-osdu-relationship"
_COMPOSITION_KEYS = ("allOf", "anyOf", "oneOf")
_CONNECTABLE_ARRAY_HINTS = ("connection", "component", "node")


@dataclass
class CollectResult:
    properties: list[PropertyInfo] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
    refs: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _traverse(
    obj: Any,
    visit: Callable[[Mapping[str, Any], tuple[str, ...]], None],
    path: tuple[str, ...] = (),
    _active: Optional[set[int]] = None,
) -> None:
    """Depth-first traversal calling *visit(node, path)* on every mapping.

    Object identity is tracked along the current branch so a document that
    contains itself (possible with pre-resolved refs) terminates.
    """
    if not isinstance(obj, Mapping):
        return
    active = _active if _active is not None else set()
    if id(obj) in active:
        return
    active.add(id(obj))
    try:
        visit(obj, path)

        props = obj.get("properties")
        if isinstance(props, Mapping):
            for key, value in props.items():
                _traverse(value, visit, path + (str(key),), active)

        for key in _COMPOSITION_KEYS:
            subs = obj.get(key)
            if isinstance(subs, list):
                for sub in subs:
                    _traverse(sub, visit, path, active)

        items = obj.get("items")
        if items:
            _traverse(items, visit, path, active)
    finally:
        active.discard(id(obj))


def _relationship_entries(obj: Mapping[str, Any]) -> Iterator[tuple[str, str]]:
    """Yield ``(GroupType, EntityType)`` pairs of a relationship extension."""
    entries = obj.get(RELATIONSHIP_KEY)
    if not isinstance(entries, list):
        return
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        yield str(entry.get("GroupType") or ""), str(entry.get("EntityType") or "")


def _required_names(schema: Any) -> set[str]:
    if isinstance(schema, Mapping) and isinstance(schema.get("required"), list):
        return {str(r) for r in schema["required"]}
    return set()


def _classify(property_name: str, target_entity: str) -> tuple[str, bool]:
    """Return ``(relationship_type, is_connectable)`` for one relationship hit."""
    prop = property_name.lower()
    target = target_entity.lower()
    if "connect" in prop or "connection" in target:
        return "connects to", True
    if "component" in prop or "component" in target:
        return "contains", False
    if "parent" in prop or "assembly" in prop:
        return "part of", False
    return "references", False


def _property_entries(
    schema: Any,
    visit_extra: Optional[Callable[[Mapping[str, Any], tuple[str, ...]], None]] = None,
) -> list[PropertyInfo]:
    required = _required_names(schema)
    out: list[PropertyInfo] = []

    def visit(obj: Mapping[str, Any], path: tuple[str, ...]) -> None:
        if visit_extra is not None:
            visit_extra(obj, path)
        props = obj.get("properties")
        if not isinstance(props, Mapping):
            return
        for key, value in props.items():
            depth = len(path) + 1
            description = value.get("description") if isinstance(value, Mapping) else None
            out.append(
                PropertyInfo(
                    name=".".join(path + (str(key),)),
                    type=property_type(value),
                    description=description if isinstance(description, str) else None,
                    required=depth == 1 and str(key) in required,
                    depth=depth,
                )
            )

    _traverse(schema, visit)
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def property_type(value: Any) -> Optional[str]:
    """Display type of a property sub-schema.

    Scalar ``type`` wins; a list of types is joined with ``|``; otherwise a
    ``$ref`` yields ``"$ref:<target>"``.
    """
    if not isinstance(value, Mapping):
        return None
    declared = value.get("type")
    if isinstance(declared, list):
        return "|".join(str(t) for t in declared)
    if declared:
        return str(declared)
    ref = value.get("$ref")
    if isinstance(ref, str):
        return f"$ref:{ref}"
    return None


def collect_from_schema(schema: Any) -> CollectResult:
    """Run the generic walk over *schema*.

    Returns property entries in document order, every relation hit and every
    ``$ref`` string (duplicates kept; callers dedupe where they need to).
    """
    result = CollectResult()

    def visit(obj: Mapping[str, Any], path: tuple[str, ...]) -> None:
        ref = obj.get("$ref")
        if isinstance(ref, str):
            result.refs.append(ref)
            result.relations.append(
                Relation(kind=ref, target=ref, relation_type="ref",
                         source_property=path[-1] if path else "")
            )
        for group_type, entity_type in _relationship_entries(obj):
            result.relations.append(
                Relation(
                    kind=f"{group_type}--{entity_type}",
                    target=entity_type,
                    relation_type="relationship",
                    source_property=path[-1] if path else "",
                )
            )

    result.properties = _property_entries(schema, visit)
    return result


def collect_properties(schema: Any) -> list[PropertyInfo]:
    """Property entries only; used to describe related and abstract schemas."""
    return _property_entries(schema)


def extract_erd_relationships(schema: Any) -> list[ErdRelationship]:
    """Run the ERD walk over *schema*.

    Relationship hits at the root (empty path) are ignored.  Arrays whose
    property name hints at connectables and whose ``items`` carry the
    extension are recorded a second time as ``contains`` / one-to-many; the
    walk then reaches the same ``items`` node and records the direct hit too.
    """
    out: list[ErdRelationship] = []

    def visit(obj: Mapping[str, Any], path: tuple[str, ...]) -> None:
        if not path:
            return
        property_name = path[-1]

        for group_type, entity_type in _relationship_entries(obj):
            relationship_type, connectable = _classify(property_name, entity_type)
            out.append(
                ErdRelationship(
                    source_property=property_name,
                    target_entity=entity_type,
                    relationship_type=relationship_type,
                    cardinality="one-to-many" if obj.get("type") == "array" else "one-to-one",
                    is_connectable=connectable,
                    group_type=group_type or None,
                )
            )

        items = obj.get("items")
        if obj.get("type") == "array" and isinstance(items, Mapping):
            lowered = property_name.lower()
            if any(hint in lowered for hint in _CONNECTABLE_ARRAY_HINTS):
                for group_type, entity_type in _relationship_entries(items):
                    out.append(
                        ErdRelationship(
                            source_property=property_name,
                            target_entity=entity_type,
                            relationship_type="contains",
                            cardinality="one-to-many",
                            is_connectable=True,
                            group_type=group_type or None,
                        )
                    )

    _traverse(schema, visit)
    return out
