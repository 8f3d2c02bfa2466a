"""Column-to-node mapping: one node per table column, positions seeded from the saved layout."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from src.graph.edges import incoming_edge
from src.graph.percent_change import ROOT_PERCENT, column_scalar, percent_change
from src.models.schemas import Edge, Node, Position, Table
from src.utils.text_processing import node_label

DEFAULT_ROW_SPACING = 150.0


class MappedGraph(BaseModel):
    """Fresh nodes in column order plus the incoming edge chosen for each."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)


def _saved_positions(persisted_nodes: Any) -> dict[str, Position]:
    if not isinstance(persisted_nodes, (list, tuple)):
        return {}
    positions: dict[str, Position] = {}
    for node in persisted_nodes:
        if isinstance(node, Node) and node.id not in positions:
            positions[node.id] = node.position
    return positions


def edge_percent_change(table: Table, source_id: str, target_id: str) -> float:
    """Percent change of `target_id` measured against `source_id`.

    A source that is not a column of the table has nothing to compare against,
    so the root default applies.
    """
    parent_idx = table.column_index(source_id)
    child_idx = table.column_index(target_id)
    if parent_idx < 0 or child_idx < 0:
        return ROOT_PERCENT
    return percent_change(
        table.column_values(parent_idx),
        table.column_values(child_idx),
        table.columns[parent_idx].is_aggregate,
        table.columns[child_idx].is_aggregate,
    )


def map_columns(
    table: Table,
    persisted_nodes: Sequence[Node] | Any = (),
    persisted_edges: Sequence[Edge] | Any = (),
    *,
    row_spacing: float = DEFAULT_ROW_SPACING,
) -> MappedGraph:
    saved = _saved_positions(persisted_nodes)
    nodes: list[Node] = []
    edges: list[Edge] = []

    for index, column in enumerate(table.columns):
        values = table.column_values(index)
        scalar = column_scalar(values, column.is_aggregate)

        edge = incoming_edge(persisted_edges, column.id, table.columns)
        pct = ROOT_PERCENT
        if edge is not None:
            pct = edge_percent_change(table, edge.source, column.id)
            edges.append(edge.model_copy(update={"percent_change": pct}))

        nodes.append(
            Node(
                id=column.id,
                label=node_label(column.display_name, scalar),
                position=saved.get(column.id, Position(x=0, y=index * row_spacing)),
                percent_change=pct,
            )
        )

    return MappedGraph(nodes=nodes, edges=edges)
