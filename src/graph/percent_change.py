"""Parent-to-child relative change between two table columns."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from src.utils.text_processing import to_number

# Mixed aggregate/grouping pairs have no meaningful ratio.
MIXED_KIND_PERCENT = 100.0
ROOT_PERCENT = 100.0


def aggregate_scalar(values: Iterable[Any]) -> float:
    """Sum of all row values; non-numeric cells count as 0."""
    return sum((to_number(v) for v in values), 0.0)


def distinct_count(values: Iterable[Any]) -> int:
    """Number of distinct cells. Booleans never collapse into 1 or 0."""
    seen: set[tuple[bool, Any]] = set()
    for value in values:
        is_bool = isinstance(value, bool)
        try:
            seen.add((is_bool, value))
        except TypeError:
            # unhashable cells (lists, dicts) compare by their repr
            seen.add((is_bool, repr(value)))
    return len(seen)


def column_scalar(values: Sequence[Any], is_aggregate: bool) -> float | int:
    """The magnitude shown on a node: sum for aggregates, distinct count otherwise."""
    return aggregate_scalar(values) if is_aggregate else distinct_count(values)


def _ratio(child: float, parent: float) -> float:
    if parent == 0:
        return 0.0
    return round(child / parent * 100, 2)


def percent_change(
    parent_values: Sequence[Any] | None,
    child_values: Sequence[Any] | None,
    parent_is_aggregate: bool,
    child_is_aggregate: bool,
) -> float:
    """Child magnitude relative to parent magnitude, in percent (2 decimals).

    Both aggregates compare sums, both groupings compare distinct counts,
    and a mixed pair is always 100. A zero parent yields 0.
    """
    parent_values = parent_values or []
    child_values = child_values or []

    if parent_is_aggregate and child_is_aggregate:
        return _ratio(aggregate_scalar(child_values), aggregate_scalar(parent_values))
    if not parent_is_aggregate and not child_is_aggregate:
        return _ratio(distinct_count(child_values), distinct_count(parent_values))
    return MIXED_KIND_PERCENT
