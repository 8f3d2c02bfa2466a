"""Unit tests for the persisted layout contract."""

from __future__ import annotations

import json

import pytest

from src.graph.serialization import (
    LayoutBlob,
    decode_array,
    dump_edges,
    dump_nodes,
    load_snapshot,
)
from src.models.schemas import Edge, Node, Position
from src.utils.exceptions import PersistedStateError


def test_missing_blob_is_empty():
    snapshot = load_snapshot(None)
    assert snapshot.nodes == [] and snapshot.edges == []


@pytest.mark.parametrize("raw", ["{not json", '{"id": "a"}', "42", "null"])
def test_malformed_parts_degrade_to_empty(raw):
    snapshot = load_snapshot(LayoutBlob(node_positions=raw, edge_list=raw))
    assert snapshot.nodes == []
    assert snapshot.edges == []


def test_one_bad_part_does_not_spoil_the_other():
    blob = LayoutBlob(
        node_positions='[{"id": "a", "position": {"x": 1, "y": 2}}]',
        edge_list="[oops",
    )
    snapshot = load_snapshot(blob)
    assert [n.id for n in snapshot.nodes] == ["a"]
    assert snapshot.edges == []


def test_invalid_entries_are_skipped():
    blob = LayoutBlob(
        node_positions=json.dumps([
            {"id": "a", "position": {"x": 1, "y": 2}},
            {"position": {"x": 0, "y": 0}},
            "junk",
        ]),
    )
    assert [n.id for n in load_snapshot(blob).nodes] == ["a"]


def test_host_shaped_payloads_are_accepted():
    nodes = [{"id": "a", "label": "A (3)", "position": {"x": 5, "y": 6}, "percentChange": 100}]
    edges = [{
        "id": "ea-b",
        "source": "a",
        "target": "b",
        "label": "50%",
        "type": "step",
        "style": {"stroke": "#183B4E", "strokeWidth": 2.5},
        "data": {"percentChange": 50},
    }]
    snapshot = load_snapshot(LayoutBlob(node_positions=json.dumps(nodes), edge_list=json.dumps(edges)))

    assert snapshot.nodes[0].position == Position(x=5, y=6)
    assert (snapshot.edges[0].source, snapshot.edges[0].target) == ("a", "b")


def test_newer_schema_version_is_not_trusted():
    blob = LayoutBlob(node_positions='[{"id": "a"}]', schema_version=99)
    assert load_snapshot(blob).nodes == []


def test_dumped_layout_loads_back():
    nodes = [Node(id="a", label="A (1)", position=Position(x=1.5, y=-2), percent_change=12.5)]
    edges = [Edge(id="ea-b", source="a", target="b", percent_change=12.5)]

    raw_edges = json.loads(dump_edges(edges))
    assert raw_edges[0]["percentChange"] == 12.5
    assert raw_edges[0]["label"] == "12.5%"

    snapshot = load_snapshot(LayoutBlob(node_positions=dump_nodes(nodes), edge_list=dump_edges(edges)))
    assert snapshot.nodes == nodes
    assert snapshot.edges == edges


def test_from_mapping_handles_bytes_and_bad_version():
    blob = LayoutBlob.from_mapping({"nodePositions": b"[]", "schemaVersion": "x"})
    assert blob.node_positions == "[]"
    assert blob.edge_list is None
    assert blob.schema_version == 1
    assert blob.to_mapping() == {"schemaVersion": "1", "nodePositions": "[]"}


def test_decode_array_raises_for_callers_that_want_to_know():
    with pytest.raises(PersistedStateError):
        decode_array('{"a": 1}', "edgeList")
    assert decode_array("", "edgeList") == []
