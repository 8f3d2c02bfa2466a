"""Incoming-edge inference from persisted edges and column order."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from src.models.schemas import Column, Edge
from src.utils.logging import get_logger

logger = get_logger(__name__)


def chain_edge_id(source_id: str, target_id: str) -> str:
    return f"{source_id}-{target_id}"


def as_edge_list(persisted_edges: Any) -> list[Edge]:
    """Anything that is not a list of edges counts as 'no persisted edges'."""
    if not isinstance(persisted_edges, (list, tuple)):
        if persisted_edges is not None:
            logger.warning("persisted_edges_not_a_list", got=type(persisted_edges).__name__)
        return []
    return [edge for edge in persisted_edges if isinstance(edge, Edge)]


def incoming_edge(
    persisted_edges: Any,
    column_id: str,
    columns: Sequence[Column],
) -> Edge | None:
    """Persisted edge into `column_id` if one exists, else one from the preceding column.

    The first column is the implicit root and never gets a synthesized edge.
    """
    for edge in as_edge_list(persisted_edges):
        if edge.target == column_id:
            return edge

    index = next((i for i, c in enumerate(columns) if c.id == column_id), -1)
    if index <= 0:
        return None

    prev_id = columns[index - 1].id
    return Edge(id=chain_edge_id(prev_id, column_id), source=prev_id, target=column_id)


def infer_chain(columns: Sequence[Column]) -> list[Edge]:
    """Every column chained to its predecessor, ignoring persisted edges."""
    return [
        Edge(id=chain_edge_id(prev.id, col.id), source=prev.id, target=col.id)
        for prev, col in zip(columns, columns[1:])
    ]


def drop_dangling(edges: Iterable[Edge], node_ids: set[str]) -> list[Edge]:
    """Keep only edges between known nodes, one incoming edge per target."""
    kept: list[Edge] = []
    targets: set[str] = set()
    dropped = 0
    for edge in edges:
        if (
            edge.source not in node_ids
            or edge.target not in node_ids
            or edge.source == edge.target
            or edge.target in targets
        ):
            dropped += 1
            continue
        targets.add(edge.target)
        kept.append(edge)
    if dropped:
        logger.info("dangling_edges_dropped", count=dropped)
    return kept


def parent_of(edges: Iterable[Edge], node_id: str) -> str | None:
    for edge in edges:
        if edge.target == node_id:
            return edge.source
    return None


def would_create_cycle(edges: Sequence[Edge], source_id: str, target_id: str) -> bool:
    """True when `target_id` is `source_id` or one of its ancestors."""
    current: str | None = source_id
    visited: set[str] = set()
    while current is not None and current not in visited:
        if current == target_id:
            return True
        visited.add(current)
        current = parent_of(edges, current)
    return False
