"""Pydantic models for tables, graph snapshots and session state."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from src.utils.text_processing import format_percent


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ── Table input ──────────────────────────────────────────────────────


class Column(_WireModel):
    id: str = Field(..., min_length=1)
    display_name: str = Field(default="", alias="displayName")
    is_aggregate: bool = Field(default=False, alias="isAggregate")


class Table(_WireModel):
    columns: list[Column] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_column_ids(self) -> Table:
        seen: set[str] = set()
        for column in self.columns:
            if column.id in seen:
                raise ValueError(f"duplicate column id: {column.id}")
            seen.add(column.id)
        return self

    def column_index(self, column_id: str) -> int:
        """Index of a column by id, -1 if the table has no such column."""
        for idx, column in enumerate(self.columns):
            if column.id == column_id:
                return idx
        return -1

    def column_values(self, index: int) -> list[Any]:
        """All row values for the column at `index`; short rows read as None."""
        return [row[index] if index < len(row) else None for row in self.rows]


# ── Graph snapshot ───────────────────────────────────────────────────


class Position(_WireModel):
    x: float = 0.0
    y: float = 0.0


class Node(_WireModel):
    id: str
    label: str = ""
    position: Position = Field(default_factory=Position)
    percent_change: float = Field(default=100.0, alias="percentChange")


class Edge(_WireModel):
    id: str
    source: str
    target: str
    percent_change: float = Field(default=100.0, alias="percentChange")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        return format_percent(self.percent_change)


class GraphSnapshot(_WireModel):
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    @property
    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def placeholder_snapshot() -> GraphSnapshot:
    """Graph shown before the first table arrives."""
    return GraphSnapshot(
        nodes=[
            Node(id="node1", label="Node 1", position=Position(x=0, y=0), percent_change=100),
            Node(id="node2", label="Node 2", position=Position(x=0, y=150), percent_change=100),
        ],
        edges=[Edge(id="node1-node2", source="node1", target="node2")],
    )


# ── Session ──────────────────────────────────────────────────────────


class SessionState(_WireModel):
    """Everything one visual's reducer needs. Replaced, never mutated."""

    live: GraphSnapshot = Field(default_factory=placeholder_snapshot)
    persisted: GraphSnapshot = Field(default_factory=GraphSnapshot)
    selection: str | None = None
    table: Table | None = None
    data_ready: bool = Field(default=False, alias="dataReady")
