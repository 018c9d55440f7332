"""Tests for the schema walks (property collection and ERD relationships)."""

from __future__ import annotations

from schema_graph.graph.walker import (
    collect_from_schema,
    collect_properties,
    extract_erd_relationships,
    property_type,
)


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

def _rel(entity: str, group: str = "master-data") -> list[dict]:
    return [{"GroupType": group, "EntityType": entity}]


_REQUIRED_SCHEMA = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "id": {"type": "string", "description": "Identifier"},
        "name": {"type": "string"},
        "nested": {
            "type": "object",
            "required": ["X"],
            "properties": {"X": {"type": "number"}},
        },
    },
}


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestPropertyType:
    def test_scalar_type(self):
        assert property_type({"type": "string"}) == "string"

    def test_type_list_joined(self):
        assert property_type({"type": ["string", "null"]}) == "string|null"

    def test_ref_fallback(self):
        assert property_type({"$ref": "../abstract/Foo.json"}) == "$ref:../abstract/Foo.json"

    def test_untyped_and_non_mapping(self):
        assert property_type({"description": "no type"}) is None
        assert property_type("oops") is None


class TestCollectProperties:
    def test_required_only_at_top_level(self):
        props = {p.name: p for p in collect_properties(_REQUIRED_SCHEMA)}
        assert props["id"].required is True
        assert props["name"].required is True
        assert props["nested"].required is False
        assert props["nested.X"].required is False
        assert props["nested.X"].depth == 2

    def test_root_required_never_marks_nested_names(self):
        schema = dict(_REQUIRED_SCHEMA, required=["id", "name", "X", "nested.X"])
        props = {p.name: p for p in collect_properties(schema)}
        assert props["nested.X"].required is False
        assert props["id"].required is True

    def test_document_order_and_descriptions(self):
        props = collect_properties(_REQUIRED_SCHEMA)
        assert [p.name for p in props] == ["id", "name", "nested", "nested.X"]
        assert props[0].description == "Identifier"
        assert props[1].description is None

    def test_all_of_keeps_path(self):
        schema = {
            "allOf": [
                {"properties": {"a": {"type": "string"}}},
                {"properties": {"b": {"type": "integer"}}},
            ]
        }
        props = collect_properties(schema)
        assert [(p.name, p.depth) for p in props] == [("a", 1), ("b", 1)]

    def test_malformed_fragments_do_not_raise(self):
        schema = {
            "properties": {
                "a": "not-a-schema",
                "b": {"properties": ["not", "a", "mapping"]},
                "c": {"allOf": "nope", "items": 42},
            },
            "anyOf": [None, 1, "x"],
        }
        names = [p.name for p in collect_properties(schema)]
        assert names == ["a", "b", "c"]

    def test_self_containing_document_terminates(self):
        schema: dict = {"properties": {"child": {"type": "object"}}}
        schema["allOf"] = [schema]
        props = collect_properties(schema)
        assert [p.name for p in props] == ["child"]


class TestCollectFromSchema:
    def test_refs_and_relationships(self):
        schema = {
            "properties": {
                "base": {"$ref": "../abstract/Base.json"},
                "WellboreID": {"type": "string", "x-osdu-relationship": _rel("Wellbore")},
            }
        }
        result = collect_from_schema(schema)
        assert result.refs == ["../abstract/Base.json"]
        kinds = [(r.kind, r.relation_type, r.source_property) for r in result.relations]
        assert ("../abstract/Base.json", "ref", "base") in kinds
        assert ("master-data--Wellbore", "relationship", "WellboreID") in kinds

    def test_duplicate_refs_are_kept(self):
        schema = {
            "properties": {
                "a": {"$ref": "Foo.json"},
                "b": {"$ref": "Foo.json"},
            }
        }
        assert collect_from_schema(schema).refs == ["Foo.json", "Foo.json"]


class TestErdRelationships:
    def test_facility_connection_is_connectable(self):
        schema = {
            "properties": {
                "FacilityConnection": {
                    "type": "string",
                    "x-osdu-relationship": _rel("Facility"),
                }
            }
        }
        rels = extract_erd_relationships(schema)
        assert len(rels) == 1
        assert rels[0].relationship_type == "connects to"
        assert rels[0].is_connectable is True
        assert rels[0].cardinality == "one-to-one"
        assert rels[0].group_type == "master-data"

    def test_classification_order(self):
        schema = {
            "properties": {
                "ComponentID": {"x-osdu-relationship": _rel("Thing")},
                "ParentID": {"x-osdu-relationship": _rel("Thing")},
                "AssemblyID": {"x-osdu-relationship": _rel("Thing")},
                "RigID": {"x-osdu-relationship": _rel("Rig")},
                "Other": {"x-osdu-relationship": _rel("PipeConnection")},
            }
        }
        types = {r.source_property: r.relationship_type for r in extract_erd_relationships(schema)}
        assert types == {
            "ComponentID": "contains",
            "ParentID": "part of",
            "AssemblyID": "part of",
            "RigID": "references",
            "Other": "connects to",
        }

    def test_root_level_relationship_ignored(self):
        schema = {"x-osdu-relationship": _rel("Well"), "properties": {}}
        assert extract_erd_relationships(schema) == []

    def test_array_property_is_one_to_many(self):
        schema = {
            "properties": {
                "Owners": {"type": "array", "x-osdu-relationship": _rel("Organisation")},
            }
        }
        (rel,) = extract_erd_relationships(schema)
        assert rel.cardinality == "one-to-many"
        assert rel.relationship_type == "references"

    def test_connectable_array_items_recorded_twice(self):
        schema = {
            "properties": {
                "Nodes": {
                    "type": "array",
                    "items": {"type": "string", "x-osdu-relationship": _rel("Equipment")},
                }
            }
        }
        rels = extract_erd_relationships(schema)
        assert len(rels) == 2
        assert {(r.relationship_type, r.cardinality, r.is_connectable) for r in rels} == {
            ("contains", "one-to-many", True),
            ("references", "one-to-one", False),
        }
        assert all(r.source_property == "Nodes" for r in rels)
