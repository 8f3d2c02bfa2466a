"""Unit tests for the graph sync service."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from src.graph.state import CommitDrag, ConnectNodes, ExpandNode, RefreshTable
from src.models.schemas import Position, Table
from src.services.layout_store import InMemoryLayoutStore
from src.services.sync_service import GraphSyncService, RenderSink
from src.utils.exceptions import LayoutStoreError, SessionNotFoundError


class RecordingSink(RenderSink):
    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []

    def on_nodes(self, visual_id, nodes):
        self.calls.append(("nodes", [n.id for n in nodes]))

    def on_edges(self, visual_id, edges):
        for edge in edges:
            assert edge.source in self.drawn and edge.target in self.drawn
        self.calls.append(("edges", [e.id for e in edges]))

    @property
    def drawn(self) -> set[str]:
        return {i for kind, ids in self.calls if kind == "nodes" for i in ids}


@pytest.mark.asyncio
async def test_refresh_emits_nodes_before_edges(sync_service, sales_table):
    sink = RecordingSink()
    sync_service.add_sink(sink)

    await sync_service.apply("v1", RefreshTable(table=sales_table))

    assert [kind for kind, _ in sink.calls] == ["nodes", "edges"]
    assert sink.calls[1][1] == ["region-city", "city-sales", "sales-margin"]


@pytest.mark.asyncio
async def test_skipped_refresh_emits_nothing(sync_service):
    sink = RecordingSink()
    sync_service.add_sink(sink)

    transition = await sync_service.apply("v1", RefreshTable(table=Table()))

    assert transition.applied is False
    assert sink.calls == []


@pytest.mark.asyncio
async def test_plain_refresh_writes_nothing(sync_service, store, sales_table):
    await sync_service.apply("v1", RefreshTable(table=sales_table))
    await sync_service.flush()

    assert await store.read("v1") is None


@pytest.mark.asyncio
async def test_drag_and_connect_are_persisted(sync_service, store, sales_table):
    await sync_service.apply("v1", RefreshTable(table=sales_table))
    await sync_service.apply("v1", CommitDrag(node_id="sales", position=Position(x=77, y=88)))
    await sync_service.apply("v1", ConnectNodes(source="region", target="sales"))
    await sync_service.flush("v1")

    blob = await store.read("v1")
    nodes = {n["id"]: n for n in json.loads(blob.node_positions)}
    edges = json.loads(blob.edge_list)

    assert nodes["sales"]["position"] == {"x": 77.0, "y": 88.0}
    assert [e["source"] for e in edges if e["target"] == "sales"] == ["region"]
    assert blob.schema_version == 1


@pytest.mark.asyncio
async def test_new_session_is_seeded_from_store(sales_table):
    store = InMemoryLayoutStore()
    await store.merge("v1", {
        "nodePositions": json.dumps([{"id": "margin", "position": {"x": -400, "y": 10}}]),
        "edgeList": "not json",
    })
    service = GraphSyncService(store, debounce_seconds=0)

    transition = await service.apply("v1", RefreshTable(table=sales_table))

    assert transition.snapshot.node("margin").position == Position(x=-400, y=10)
    assert len(transition.snapshot.edges) == 3


@pytest.mark.asyncio
async def test_store_read_failure_starts_empty(sales_table):
    store = InMemoryLayoutStore()
    store.read = AsyncMock(side_effect=LayoutStoreError("down"))
    service = GraphSyncService(store, debounce_seconds=0)

    state = await service.open_session("v1")

    assert state.persisted.nodes == []
    assert [n.id for n in state.live.nodes] == ["node1", "node2"]


@pytest.mark.asyncio
async def test_expand_round_trip_through_store(sync_service, store, table_factory):
    await sync_service.apply("v1", RefreshTable(table=table_factory("region", "city")))
    await sync_service.apply("v1", ExpandNode(node_id="region", table=table_factory("region", "city", "sales")))
    await sync_service.close()

    reopened = GraphSyncService(store, debounce_seconds=0)
    transition = await reopened.apply("v1", RefreshTable(table=table_factory("region", "city", "sales")))

    assert transition.snapshot.node("city").position == Position(x=250, y=150)
    assert transition.snapshot.node("sales").position == Position(x=-250, y=150)
    assert [e.source for e in transition.snapshot.edges if e.target == "sales"] == ["region"]


def test_unknown_session(sync_service):
    with pytest.raises(SessionNotFoundError):
        sync_service.get_session("nope")


@pytest.mark.asyncio
async def test_close_survives_failing_write_and_closes_store(sales_table):
    store = InMemoryLayoutStore()
    real_merge = store.merge

    async def merge(visual_id, properties):
        if visual_id == "v1":
            raise LayoutStoreError("down")
        await real_merge(visual_id, properties)

    store.merge = merge
    store.close = AsyncMock()
    service = GraphSyncService(store, debounce_seconds=60)
    for vid in ("v1", "v2"):
        await service.apply(vid, RefreshTable(table=sales_table))
        await service.apply(vid, CommitDrag(node_id="city", position=Position(x=5, y=5)))

    await service.close()

    store.close.assert_awaited_once()
    assert await store.read("v1") is None
    assert (await store.read("v2")).node_positions is not None


@pytest.mark.asyncio
async def test_flush_reports_failed_visuals(sales_table):
    store = InMemoryLayoutStore()
    store.merge = AsyncMock(side_effect=LayoutStoreError("down"))
    service = GraphSyncService(store, debounce_seconds=60)
    await service.apply("v1", RefreshTable(table=sales_table))
    await service.apply("v1", ConnectNodes(source="region", target="sales"))

    assert await service.flush() == ["v1"]


@pytest.mark.asyncio
async def test_close_session_flushes_and_evicts(sync_service, store, sales_table):
    await sync_service.apply("v1", RefreshTable(table=sales_table))
    await sync_service.apply("v1", CommitDrag(node_id="sales", position=Position(x=1, y=2)))

    assert await sync_service.close_session("v1") is True
    assert (await store.read("v1")).node_positions is not None
    with pytest.raises(SessionNotFoundError):
        sync_service.get_session("v1")
    assert await sync_service.close_session("v1") is False

    reopened = await sync_service.open_session("v1")
    assert reopened.persisted.node("sales").position == Position(x=1, y=2)
