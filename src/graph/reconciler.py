"""Merge a fresh column mapping into the live graph."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from src.graph.edges import as_edge_list, drop_dangling
from src.graph.layout import DEFAULT_SPACING, LayoutSpacing, expand
from src.graph.mapper import MappedGraph, edge_percent_change
from src.models.schemas import Edge, GraphSnapshot, Node, Table
from src.utils.logging import get_logger

logger = get_logger(__name__)


class Reconciliation(BaseModel):
    snapshot: GraphSnapshot
    expanded: bool = False
    new_node_ids: list[str] = Field(default_factory=list)


def sync_edge_percentages(edges: Sequence[Edge], nodes: Sequence[Node]) -> list[Edge]:
    """Edges carry their target node's percent change."""
    by_id = {n.id: n.percent_change for n in nodes}
    return [
        e if by_id.get(e.target, e.percent_change) == e.percent_change
        else e.model_copy(update={"percent_change": by_id[e.target]})
        for e in edges
    ]


def _replace(mapped: MappedGraph, persisted_edges: list[Edge]) -> GraphSnapshot:
    node_ids = {n.id for n in mapped.nodes}
    edges = drop_dangling(persisted_edges, node_ids)
    if not edges:
        # mapped.edges is the inferred chain whenever nothing persisted survives
        edges = drop_dangling(mapped.edges, node_ids)
    return GraphSnapshot(nodes=mapped.nodes, edges=sync_edge_percentages(edges, mapped.nodes))


def reconcile(
    mapped: MappedGraph,
    persisted_edges: Sequence[Edge],
    live: GraphSnapshot,
    selection: str | None,
    spacing: LayoutSpacing = DEFAULT_SPACING,
    table: Table | None = None,
) -> Reconciliation:
    """Replace the live graph outright, or expand under the selected node.

    Expansion happens only when a selected node exists in the live graph and
    the mapping introduces ids the live graph has never shown. Non-new nodes
    then keep their live position (fresh label and percent change), and only
    the new ids are handed to the layout engine. With `table` given, new
    children are measured against the selected node rather than their
    preceding column.
    """
    persisted = as_edge_list(persisted_edges)
    live_ids = live.node_ids
    new_nodes = [n for n in mapped.nodes if n.id not in live_ids]

    fresh_by_id = {n.id: n for n in mapped.nodes}
    has_parent = bool(selection) and selection in live_ids and selection in fresh_by_id
    if selection and not has_parent:
        logger.warning("selection_not_in_graph", selection=selection)

    if not has_parent or not new_nodes:
        return Reconciliation(snapshot=_replace(mapped, persisted))

    kept: list[Node] = []
    for node in live.nodes:
        fresh = fresh_by_id.get(node.id)
        if fresh is None:
            continue
        kept.append(fresh.model_copy(update={"position": node.position}))

    parent = next(n for n in kept if n.id == selection)
    kept_ids = {n.id for n in kept}
    live_edges = drop_dangling(live.edges, kept_ids)

    if table is not None:
        new_nodes = [
            n.model_copy(update={"percent_change": edge_percent_change(table, parent.id, n.id)})
            for n in new_nodes
        ]

    nodes, edges = expand(parent, kept, live_edges, new_nodes, spacing)
    edges = drop_dangling(edges, {n.id for n in nodes})

    new_ids = [n.id for n in new_nodes]
    logger.info("graph_expanded", parent=parent.id, new_children=new_ids)
    return Reconciliation(
        snapshot=GraphSnapshot(nodes=nodes, edges=sync_edge_percentages(edges, nodes)),
        expanded=True,
        new_node_ids=new_ids,
    )
