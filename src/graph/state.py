"""Session reducer: (SessionState, Trigger) -> Transition.

Every user or host event is a trigger. The reducer never mutates the
prior state; it returns the next state, the snapshot to draw (None when
nothing changed), and which parts of that snapshot must be saved.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.graph.edges import would_create_cycle
from src.graph.layout import DEFAULT_SPACING, LayoutSpacing, parent_edge_id
from src.graph.mapper import edge_percent_change, map_columns
from src.graph.percent_change import ROOT_PERCENT
from src.graph.reconciler import reconcile, sync_edge_percentages
from src.models.schemas import Edge, GraphSnapshot, Position, SessionState, Table
from src.utils.logging import get_logger

logger = get_logger(__name__)


class PersistScope(str, Enum):
    NONE = "none"
    NODES = "nodes"
    EDGES = "edges"
    ALL = "all"

    @property
    def nodes(self) -> bool:
        return self in (PersistScope.NODES, PersistScope.ALL)

    @property
    def edges(self) -> bool:
        return self in (PersistScope.EDGES, PersistScope.ALL)


# ── Triggers ─────────────────────────────────────────────────────────


class _Trigger(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RefreshTable(_Trigger):
    kind: Literal["refresh_table"] = "refresh_table"
    table: Table


class CommitDrag(_Trigger):
    kind: Literal["commit_drag"] = "commit_drag"
    node_id: str = Field(alias="nodeId")
    position: Position


class ConnectNodes(_Trigger):
    kind: Literal["connect_nodes"] = "connect_nodes"
    source: str
    target: str


class SelectNode(_Trigger):
    kind: Literal["select_node"] = "select_node"
    node_id: str | None = Field(default=None, alias="nodeId")


class ExpandNode(_Trigger):
    kind: Literal["expand_node"] = "expand_node"
    node_id: str = Field(alias="nodeId")
    table: Table


Trigger = Annotated[
    Union[RefreshTable, CommitDrag, ConnectNodes, SelectNode, ExpandNode],
    Field(discriminator="kind"),
]


class Transition(BaseModel):
    state: SessionState
    snapshot: GraphSnapshot | None = None
    persist: PersistScope = PersistScope.NONE

    @property
    def applied(self) -> bool:
        return self.snapshot is not None


# ── Reducers ─────────────────────────────────────────────────────────


def _unchanged(state: SessionState) -> Transition:
    return Transition(state=state)


def _refresh(state: SessionState, table: Table, spacing: LayoutSpacing) -> Transition:
    if not table.rows:
        logger.info("refresh_skipped_empty_table", columns=len(table.columns))
        return _unchanged(state)

    mapped = map_columns(
        table,
        state.persisted.nodes,
        state.persisted.edges,
        row_spacing=spacing.row_spacing,
    )
    # The placeholder graph is never a valid expansion parent.
    selection = state.selection if state.data_ready else None
    result = reconcile(mapped, state.persisted.edges, state.live, selection, spacing, table)

    persisted = state.persisted
    persist = PersistScope.NONE
    if result.expanded:
        persisted = result.snapshot
        persist = PersistScope.ALL

    logger.debug(
        "table_refreshed",
        nodes=len(result.snapshot.nodes),
        edges=len(result.snapshot.edges),
        expanded=result.expanded,
    )
    next_state = state.model_copy(
        update={
            "live": result.snapshot,
            "persisted": persisted,
            "table": table,
            "data_ready": True,
        }
    )
    return Transition(state=next_state, snapshot=result.snapshot, persist=persist)


def _commit_drag(state: SessionState, trigger: CommitDrag) -> Transition:
    if state.live.node(trigger.node_id) is None:
        logger.warning("drag_unknown_node", node_id=trigger.node_id)
        return _unchanged(state)

    nodes = [
        n.model_copy(update={"position": trigger.position}) if n.id == trigger.node_id else n
        for n in state.live.nodes
    ]
    live = state.live.model_copy(update={"nodes": nodes})
    persisted = state.persisted.model_copy(update={"nodes": nodes})
    return Transition(
        state=state.model_copy(update={"live": live, "persisted": persisted}),
        snapshot=live,
        persist=PersistScope.NODES,
    )


def _connect(state: SessionState, trigger: ConnectNodes) -> Transition:
    source, target = trigger.source, trigger.target
    ids = state.live.node_ids
    if source not in ids or target not in ids:
        logger.warning("connect_rejected", reason="unknown_node", source=source, target=target)
        return _unchanged(state)
    if would_create_cycle(state.live.edges, source, target):
        logger.warning("connect_rejected", reason="cycle", source=source, target=target)
        return _unchanged(state)

    pct = edge_percent_change(state.table, source, target) if state.table is not None else ROOT_PERCENT
    nodes = [
        n.model_copy(update={"percent_change": pct}) if n.id == target else n
        for n in state.live.nodes
    ]
    # one parent per node: a new connection replaces the target's incoming edge
    edges = [e for e in state.live.edges if e.target != target]
    edges.append(
        Edge(id=parent_edge_id(source, target), source=source, target=target, percent_change=pct)
    )
    edges = sync_edge_percentages(edges, nodes)

    live = GraphSnapshot(nodes=nodes, edges=edges)
    persisted = state.persisted.model_copy(update={"edges": edges})
    logger.info("nodes_connected", source=source, target=target, percent_change=pct)
    return Transition(
        state=state.model_copy(update={"live": live, "persisted": persisted}),
        snapshot=live,
        persist=PersistScope.EDGES,
    )


def _select(state: SessionState, node_id: str | None) -> SessionState:
    if node_id is not None and state.live.node(node_id) is None:
        logger.warning("select_unknown_node", node_id=node_id)
        node_id = None
    return state.model_copy(update={"selection": node_id})


def reduce(
    state: SessionState,
    trigger: RefreshTable | CommitDrag | ConnectNodes | SelectNode | ExpandNode,
    spacing: LayoutSpacing = DEFAULT_SPACING,
) -> Transition:
    if isinstance(trigger, RefreshTable):
        return _refresh(state, trigger.table, spacing)
    if isinstance(trigger, CommitDrag):
        return _commit_drag(state, trigger)
    if isinstance(trigger, ConnectNodes):
        return _connect(state, trigger)
    if isinstance(trigger, SelectNode):
        return _unchanged(_select(state, trigger.node_id))
    if isinstance(trigger, ExpandNode):
        return _refresh(_select(state, trigger.node_id), trigger.table, spacing)
    raise TypeError(f"Unknown trigger: {type(trigger).__name__}")
