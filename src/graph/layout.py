"""Fan-out placement of child nodes under an expanded parent.

Children alternate right and left of the parent, moving one column of
spacing further out every second slot:

    slot:    0     1     2     3     4
    x:     +250  -250  +500  -500  +750

All children sit one row below the parent. Every expand repositions the
whole sibling group (existing children first, then new ones), so the shape
is stable even though previously placed children may move.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from src.models.schemas import Edge, Node, Position


class LayoutSpacing(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_spacing: float = 150.0
    child_x_spacing: float = 250.0
    child_y_offset: float = 150.0


DEFAULT_SPACING = LayoutSpacing()


def slot_position(parent: Position, slot: int, spacing: LayoutSpacing = DEFAULT_SPACING) -> Position:
    offset = (slot + 1) // 2
    dx = spacing.child_x_spacing * offset
    return Position(
        x=parent.x + (dx if slot % 2 == 0 else -dx),
        y=parent.y + spacing.child_y_offset,
    )


def parent_edge_id(parent_id: str, child_id: str) -> str:
    return f"e{parent_id}-{child_id}"


def children_of(parent_id: str, nodes: Sequence[Node], edges: Sequence[Edge]) -> list[Node]:
    """Existing children of `parent_id`, in node-list order."""
    child_ids = {e.target for e in edges if e.source == parent_id}
    return [n for n in nodes if n.id in child_ids]


def layout_children(
    parent: Node,
    existing_children: Sequence[Node],
    new_children: Sequence[Node],
    spacing: LayoutSpacing = DEFAULT_SPACING,
) -> list[Node]:
    """Reposition `existing ++ new` into the left/right fan under `parent`."""
    ordered = [*existing_children, *new_children]
    return [
        child.model_copy(update={"position": slot_position(parent.position, slot, spacing)})
        for slot, child in enumerate(ordered)
    ]


def expand(
    parent: Node,
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    new_children: Sequence[Node],
    spacing: LayoutSpacing = DEFAULT_SPACING,
) -> tuple[list[Node], list[Edge]]:
    """Attach `new_children` under `parent` and re-fan the whole sibling group.

    Nodes outside the group keep their place in the list; the group is
    appended after them. One edge per new child is appended. Nothing is
    removed.
    """
    existing = children_of(parent.id, nodes, edges)
    placed = layout_children(parent, existing, new_children, spacing)
    placed_ids = {n.id for n in placed}

    out_nodes = [n for n in nodes if n.id not in placed_ids] + placed

    out_edges = list(edges)
    edge_ids = {e.id for e in out_edges}
    for child in placed[len(existing):]:
        edge_id = parent_edge_id(parent.id, child.id)
        if edge_id in edge_ids:
            continue
        out_edges.append(
            Edge(
                id=edge_id,
                source=parent.id,
                target=child.id,
                percent_change=child.percent_change,
            )
        )
        edge_ids.add(edge_id)

    return out_nodes, out_edges
