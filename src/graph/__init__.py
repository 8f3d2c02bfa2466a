"""Graph sync engine: pure functions over tables and graph snapshots."""

from __future__ import annotations

from src.graph.layout import LayoutSpacing, expand, layout_children
from src.graph.mapper import MappedGraph, map_columns
from src.graph.percent_change import percent_change
from src.graph.reconciler import Reconciliation, reconcile
from src.graph.state import (
    CommitDrag,
    ConnectNodes,
    ExpandNode,
    PersistScope,
    RefreshTable,
    SelectNode,
    Transition,
    Trigger,
    reduce,
)

__all__ = [
    "CommitDrag",
    "ConnectNodes",
    "ExpandNode",
    "LayoutSpacing",
    "MappedGraph",
    "PersistScope",
    "Reconciliation",
    "RefreshTable",
    "SelectNode",
    "Transition",
    "Trigger",
    "expand",
    "layout_children",
    "map_columns",
    "percent_change",
    "reconcile",
    "reduce",
]
