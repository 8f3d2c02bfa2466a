"""Persisted layout blob: the `layout` object with `nodePositions` and `edgeList`.

Both properties are independently JSON-encoded arrays. Decoding never fails:
bad JSON, a non-array value, a newer schema version, or an invalid entry
degrades to "nothing saved" for that part and logs a warning.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.models.schemas import Edge, GraphSnapshot, Node
from src.utils.exceptions import PersistedStateError
from src.utils.logging import get_logger

logger = get_logger(__name__)

LAYOUT_OBJECT_NAME = "layout"
NODE_POSITIONS_KEY = "nodePositions"
EDGE_LIST_KEY = "edgeList"
SCHEMA_VERSION_KEY = "schemaVersion"
SCHEMA_VERSION = 1

M = TypeVar("M", bound=BaseModel)


class LayoutBlob(BaseModel):
    """Raw property strings as the host stores them."""

    model_config = ConfigDict(populate_by_name=True)

    node_positions: str | None = Field(default=None, alias=NODE_POSITIONS_KEY)
    edge_list: str | None = Field(default=None, alias=EDGE_LIST_KEY)
    schema_version: int = Field(default=SCHEMA_VERSION, alias=SCHEMA_VERSION_KEY)

    @classmethod
    def from_mapping(cls, raw: dict[str, Any] | None) -> LayoutBlob:
        raw = raw or {}
        version = raw.get(SCHEMA_VERSION_KEY, SCHEMA_VERSION)
        try:
            version = int(version)
        except (TypeError, ValueError):
            version = SCHEMA_VERSION
        return cls(
            node_positions=_as_text(raw.get(NODE_POSITIONS_KEY)),
            edge_list=_as_text(raw.get(EDGE_LIST_KEY)),
            schema_version=version,
        )

    def to_mapping(self) -> dict[str, str]:
        out = {SCHEMA_VERSION_KEY: str(self.schema_version)}
        if self.node_positions is not None:
            out[NODE_POSITIONS_KEY] = self.node_positions
        if self.edge_list is not None:
            out[EDGE_LIST_KEY] = self.edge_list
        return out


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def decode_array(raw: str | None, what: str) -> list[Any]:
    """JSON-decode `raw` and insist on an array.

    Raises PersistedStateError; callers that must not fail use
    `parse_items` instead.
    """
    if raw is None or raw == "":
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PersistedStateError(f"{what} is not valid JSON: {exc}") from exc
    if not isinstance(value, list):
        raise PersistedStateError(f"{what} is {type(value).__name__}, expected an array")
    return value


def parse_items(raw: str | None, model: type[M], what: str) -> list[M]:
    try:
        items = decode_array(raw, what)
    except PersistedStateError as exc:
        logger.warning("persisted_state_malformed", part=what, error=str(exc))
        return []

    parsed: list[M] = []
    skipped = 0
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("persisted_entries_skipped", part=what, skipped=skipped)
    return parsed


def load_snapshot(blob: LayoutBlob | None) -> GraphSnapshot:
    """The persisted snapshot stored in `blob`, empty on any violation."""
    if blob is None:
        return GraphSnapshot()
    if blob.schema_version > SCHEMA_VERSION:
        logger.warning(
            "persisted_schema_unsupported",
            version=blob.schema_version,
            supported=SCHEMA_VERSION,
        )
        return GraphSnapshot()
    return GraphSnapshot(
        nodes=parse_items(blob.node_positions, Node, NODE_POSITIONS_KEY),
        edges=parse_items(blob.edge_list, Edge, EDGE_LIST_KEY),
    )


def dump_nodes(nodes: list[Node]) -> str:
    return json.dumps([n.model_dump(mode="json", by_alias=True) for n in nodes])


def dump_edges(edges: list[Edge]) -> str:
    return json.dumps([e.model_dump(mode="json", by_alias=True) for e in edges])
