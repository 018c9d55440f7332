"""Tests for graph extraction (``build_graph``) in ERD and legacy mode."""

from __future__ import annotations

import json

import pytest

from schema_graph.graph import GraphBuildOptions, SchemaEdge, SchemaModel, build_graph, validate_edges
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
    NodeData,
    SchemaNode,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _rel(entity: str, group: str = "master-data") -> list[dict]:
    return [{"GroupType": group, "EntityType": entity}]


@pytest.fixture()
def well_schema() -> dict:
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "$id": "osdu:wks:master-data--Well:1.0.0",
        "title": "Well",
        "type": "object",
        "properties": {
            "rigType": {
                "type": "object",
                "properties": {
                    "RigTypeID": {"$ref": "../reference-data/RigType.1.json"},
                },
            },
        },
    }


@pytest.fixture()
def rich_schema() -> dict:
    return {
        "$id": "osdu:wks:master-data--Wellbore:1.0.0",
        "title": "Wellbore",
        "required": ["WellID"],
        "allOf": [
            {"$ref": "../abstract/AbstractCommonResources.1.0.0.json"},
            {"$ref": "../abstract/AbstractFacility.1.0.0.json"},
        ],
        "properties": {
            "WellID": {"type": "string", "x-osdu-relationship": _rel("Well")},
            "PrimaryWellID": {"type": "string", "x-osdu-relationship": _rel("Well")},
            "FacilityConnection": {"type": "string", "x-osdu-relationship": _rel("Platform")},
            "StatusID": {"type": "string", "x-osdu-relationship": _rel("WellStatus", "reference-data")},
            "Name": {"type": "string", "description": "Human readable name"},
        },
    }


@pytest.fixture()
def index() -> dict:
    return {
        "/data/Generated/master-data/Well.1.0.0.json": {
            "$id": "osdu:wks:master-data--Well:1.0.0",
            "title": "Well",
            "properties": {"FacilityName": {"type": "string"}},
        },
        "/data/Generated/reference-data/WellStatus.1.0.0.json": {
            "$id": "osdu:wks:reference-data--WellStatus:1.0.0",
            "title": "WellStatus",
            "properties": {"Code": {"type": "string"}},
        },
        "/data/Generated/abstract/AbstractFacility.1.0.0.min.json": {
            "$id": "X",
            "properties": {"FacilityID": {"type": "string"}},
        },
    }


def _model(schema: dict, path: str | None = None) -> SchemaModel:
    return SchemaModel.from_schema(schema, path=path)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestErdGraph:
    def test_well_rig_type_scenario(self, well_schema):
        payload = build_graph(_model(well_schema))
        assert sorted(n.kind for n in payload.nodes) == [ABSTRACT, ENTITY]
        assert len(payload.edges) == 1
        edge = payload.edges[0]
        assert edge.kind == EDGE_REF
        assert edge.source == payload.main.id
        abstract = next(n for n in payload.nodes if n.kind == ABSTRACT)
        assert edge.target == abstract.id
        assert abstract.data.label == "RigType.1"
        assert abstract.data.is_ghost

    def test_ref_resolves_to_min_json(self):
        schema = {
            "title": "Thing",
            "properties": {"facility": {"$ref": "../abstract/Foo.json"}},
        }
        foo_index = {"/data/Generated/abstract/Foo.min.json": {"$id": "X", "properties": {}}}
        payload = build_graph(_model(schema), foo_index)

        abstract = [n for n in payload.nodes if n.kind == ABSTRACT]
        assert len(abstract) == 1
        assert abstract[0].data.schema_id == "X"
        assert abstract[0].data.file_path == "/data/Generated/abstract/Foo.min.json"
        ref_edges = [e for e in payload.edges if e.kind == EDGE_REF]
        assert len(ref_edges) == 1
        assert ref_edges[0].source == payload.main.id
        assert ref_edges[0].target == abstract[0].id

    def test_main_node(self, rich_schema):
        payload = build_graph(_model(rich_schema, "/data/Generated/master-data/Wellbore.1.0.0.json"))
        main = payload.main
        assert main.id == "osdu:wks:master-data--Wellbore:1.0.0"
        assert main.data.label == "Wellbore"
        assert main.data.file_path == "/data/Generated/master-data/Wellbore.1.0.0.json"
        assert main.data.schema_id == "osdu:wks:master-data--Wellbore:1.0.0"
        assert {p.name for p in main.data.properties if p.required} == {"WellID"}
        assert len(main.data.erd_relationships) == 4

    def test_related_entities_resolved_and_deduplicated(self, rich_schema, index):
        payload = build_graph(_model(rich_schema), index)
        related = {n.data.label: n for n in payload.nodes if n.kind == RELATED_ENTITY}
        assert set(related) == {"Well", "Platform", "WellStatus"}

        well = related["Well"]
        assert well.data.category == "master-data"
        assert well.data.file_path == "/data/Generated/master-data/Well.1.0.0.json"
        assert [p.name for p in well.data.properties] == ["FacilityName"]

        assert related["WellStatus"].data.category == "reference-data"
        # nothing in the index matches Platform
        assert related["Platform"].data.is_ghost
        assert related["Platform"].data.subtitle == "Related Entity"

    def test_parallel_edges_get_suffixes(self, rich_schema, index):
        payload = build_graph(_model(rich_schema), index)
        main_id = payload.main.id
        base = f"{main_id}->erd->entity::Well"
        well_edges = [e for e in payload.edges if e.target == "entity::Well"]
        assert [e.id for e in well_edges] == [base, f"{base}#2"]
        assert [e.label for e in well_edges] == ["WellID", "PrimaryWellID"]
        assert all(e.kind == EDGE_ERD for e in well_edges)

    def test_connectable_edge(self, rich_schema):
        payload = build_graph(_model(rich_schema))
        (edge,) = [e for e in payload.edges if e.kind == EDGE_CONNECTABLE]
        assert edge.label == "FacilityConnection (connectable)"
        assert edge.metadata.is_connectable is True
        assert edge.metadata.relationship_type == "connects to"
        assert edge.metadata.cardinality == "one-to-one"

    def test_duplicate_refs_share_one_node_and_edge(self, rich_schema):
        rich_schema["properties"]["Extra"] = {"$ref": "../abstract/AbstractFacility.1.0.0.json"}
        payload = build_graph(_model(rich_schema))
        facility_id = "ref::.._abstract_AbstractFacility.1.0.0.json"
        assert [n.id for n in payload.nodes].count(facility_id) == 1
        assert [e.target for e in payload.edges if e.kind == EDGE_REF].count(facility_id) == 1
        assert len([n for n in payload.nodes if n.kind == ABSTRACT]) == 2

    def test_filter_narrows_main_node_only(self, rich_schema, index):
        full = build_graph(_model(rich_schema), index)
        narrowed = build_graph(_model(rich_schema), index, GraphBuildOptions(filter="name"))
        assert [p.name for p in narrowed.main.data.properties] == ["Name"]
        assert [n.id for n in narrowed.nodes] == [n.id for n in full.nodes]

    def test_filter_matches_description(self, rich_schema):
        payload = build_graph(_model(rich_schema), options=GraphBuildOptions(filter="READABLE"))
        assert [p.name for p in payload.main.data.properties] == ["Name"]


class TestGraphInvariants:
    @pytest.mark.parametrize("erd_view", [True, False])
    def test_idempotent(self, rich_schema, index, erd_view):
        options = GraphBuildOptions(erd_view=erd_view)
        first = build_graph(_model(rich_schema), index, options)
        second = build_graph(_model(rich_schema), index, options)
        assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())

    @pytest.mark.parametrize("erd_view", [True, False])
    def test_unique_ids_and_valid_edges(self, rich_schema, index, erd_view):
        payload = build_graph(_model(rich_schema), index, GraphBuildOptions(erd_view=erd_view))
        ids = [n.id for n in payload.nodes]
        assert len(ids) == len(set(ids))
        for edge in payload.edges:
            assert edge.source in ids
            assert edge.target in ids
        edge_ids = [e.id for e in payload.edges]
        assert len(edge_ids) == len(set(edge_ids))

    @pytest.mark.parametrize(
        "schema",
        [
            {},
            {"title": "Empty"},
            {"properties": "broken"},
            {"properties": {"a": {"allOf": [{"$ref": "#/definitions/a"}]}}},
            {"x-osdu-relationship": _rel("Root"), "properties": {"x": None}},
        ],
    )
    def test_exactly_one_entity(self, schema):
        for erd_view in (True, False):
            payload = build_graph(_model(schema), None, GraphBuildOptions(erd_view=erd_view))
            assert [n.kind for n in payload.nodes].count(ENTITY) == 1

    def test_model_without_title_or_id(self):
        payload = build_graph(SchemaModel(id="", title="", schema={}))
        assert payload.main is not None


class TestLegacyGraph:
    def test_one_node_per_relation_kind(self, rich_schema, index):
        payload = build_graph(_model(rich_schema), index, GraphBuildOptions(erd_view=False))
        kinds = [n.kind for n in payload.nodes]
        assert kinds.count(ENTITY) == 1
        assert kinds.count(ABSTRACT) == 2
        # Well (twice), Platform, WellStatus -> three distinct relationship kinds
        assert kinds.count(RELATIONSHIP) == 3
        assert all(n.shape == SHAPE_DEFAULT for n in payload.nodes)
        assert payload.main.data.erd_relationships == []

        rel_edges = [e for e in payload.edges if e.kind == EDGE_RELATIONSHIP]
        assert {e.label for e in rel_edges} == {
            "master-data--Well",
            "master-data--Platform",
            "reference-data--WellStatus",
        }
        assert len(payload.edges) == 5

    def test_abstract_node_resolved(self, rich_schema, index):
        payload = build_graph(_model(rich_schema), index, GraphBuildOptions(erd_view=False))
        facility = next(n for n in payload.nodes if n.data.label == "AbstractFacility.1.0.0")
        assert facility.data.schema_id == "X"
        assert [p.name for p in facility.data.properties] == ["FacilityID"]


class TestValidateEdges:
    def test_drops_dangling_and_self_loops(self):
        nodes = [
            SchemaNode(id="a", kind=ENTITY, data=NodeData(label="a")),
            SchemaNode(id="b", kind=ABSTRACT, data=NodeData(label="b")),
        ]
        edges = [
            SchemaEdge(id="ok", source="a", target="b", kind=EDGE_REF),
            SchemaEdge(id="dangling", source="a", target="missing", kind=EDGE_REF),
            SchemaEdge(id="loop", source="a", target="a", kind=EDGE_REF),
        ]
        assert [e.id for e in validate_edges(nodes, edges)] == ["ok"]
