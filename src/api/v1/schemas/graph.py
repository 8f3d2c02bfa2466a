"""Request/response models for the graph API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.models.schemas import Edge, Node, Table


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ConnectRequest(_Body):
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)


class SelectionRequest(_Body):
    node_id: str | None = Field(default=None, alias="nodeId")


class ExpandRequest(_Body):
    node_id: str = Field(..., min_length=1, alias="nodeId")
    table: Table


class GraphResponse(_Body):
    visual_id: str = Field(alias="visualId")
    applied: bool = True
    selection: str | None = None
    data_ready: bool = Field(default=False, alias="dataReady")
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    node_count: int = Field(default=0, alias="nodeCount")
    edge_count: int = Field(default=0, alias="edgeCount")
