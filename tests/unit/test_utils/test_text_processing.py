"""Unit tests for number coercion and label formatting."""

from __future__ import annotations

import pytest

from src.utils.text_processing import format_number, format_percent, node_label, to_number


@pytest.mark.parametrize(
    "raw,expected",
    [(3, 3.0), ("2.5", 2.5), ("abc", 0.0), (None, 0.0), (True, 1.0), (float("nan"), 0.0), ([1], 0.0)],
)
def test_to_number(raw, expected):
    assert to_number(raw) == expected


def test_integral_floats_lose_their_fraction():
    assert format_number(200.0) == "200"
    assert format_number(33.33) == "33.33"
    assert format_number(4) == "4"


def test_labels():
    assert format_percent(12.5) == "12.5%"
    assert node_label("Sales", 1250.0) == "Sales (1250)"
