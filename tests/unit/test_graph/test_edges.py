"""Unit tests for edge inference and edge hygiene."""

from __future__ import annotations

from src.graph.edges import drop_dangling, incoming_edge, infer_chain, would_create_cycle
from src.models.schemas import Edge


def test_first_column_is_root(sales_table):
    assert incoming_edge([], "region", sales_table.columns) is None


def test_other_columns_chain_to_predecessor(sales_table):
    edge = incoming_edge([], "sales", sales_table.columns)

    assert edge is not None
    assert edge.id == "city-sales"
    assert (edge.source, edge.target) == ("city", "sales")


def test_persisted_edge_is_used_verbatim(sales_table):
    saved = Edge(id="xy-edge__region-sales", source="region", target="sales", percent_change=12.5)
    assert incoming_edge([saved], "sales", sales_table.columns) == saved


def test_persisted_edges_not_a_list_means_none_saved(sales_table):
    edge = incoming_edge("[broken", "city", sales_table.columns)
    assert edge is not None and edge.source == "region"


def test_unknown_column_gets_no_edge(sales_table):
    assert incoming_edge([], "missing", sales_table.columns) is None


def test_infer_chain(sales_table):
    chain = infer_chain(sales_table.columns)

    assert [(e.source, e.target) for e in chain] == [
        ("region", "city"),
        ("city", "sales"),
        ("sales", "margin"),
    ]
    assert infer_chain(sales_table.columns[:1]) == []


def test_drop_dangling_keeps_a_forest():
    edges = [
        Edge(id="1", source="a", target="b"),
        Edge(id="2", source="a", target="ghost"),
        Edge(id="3", source="ghost", target="c"),
        Edge(id="4", source="c", target="c"),
        Edge(id="5", source="c", target="b"),
        Edge(id="6", source="a", target="c"),
    ]
    kept = drop_dangling(edges, {"a", "b", "c"})
    assert [e.id for e in kept] == ["1", "6"]


def test_would_create_cycle():
    edges = [
        Edge(id="ab", source="a", target="b"),
        Edge(id="bc", source="b", target="c"),
    ]
    assert would_create_cycle(edges, "c", "a") is True
    assert would_create_cycle(edges, "a", "a") is True
    assert would_create_cycle(edges, "a", "c") is False
    assert would_create_cycle(edges, "b", "d") is False
