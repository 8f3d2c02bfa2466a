"""Number coercion and display formatting for labels."""

from __future__ import annotations

import math
from typing import Any


def to_number(value: Any) -> float:
    """Coerce a raw cell value to a float; anything non-numeric counts as 0."""
    if value is None or isinstance(value, bool):
        return float(value or 0)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def format_number(value: float | int) -> str:
    """Render integral floats without a trailing '.0' (150.0 -> '150')."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_percent(value: float | int) -> str:
    return f"{format_number(value)}%"


def node_label(display_name: str, scalar: float | int) -> str:
    return f"{display_name} ({format_number(scalar)})"
