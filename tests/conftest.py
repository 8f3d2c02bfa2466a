"""Shared test fixtures."""

from __future__ import annotations

import pytest

from src.models.schemas import Column, Table


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Keep tests off Redis and make debounced writes fire immediately."""
    monkeypatch.setenv("LAYOUT_STORE_BACKEND", "memory")
    monkeypatch.setenv("PERSIST_DEBOUNCE_SECONDS", "0")
    monkeypatch.setenv("LOG_FORMAT", "console")


@pytest.fixture
def settings():
    from src.config import Settings

    return Settings(LAYOUT_STORE_BACKEND="memory", PERSIST_DEBOUNCE_SECONDS=0)


def make_table(*column_ids: str) -> Table:
    """Subset of the sales table, columns in the given order."""
    full = sales_columns()
    rows = sales_rows()
    index = {c.id: i for i, c in enumerate(full)}
    picked = [index[cid] for cid in column_ids]
    return Table(
        columns=[full[i] for i in picked],
        rows=[[row[i] for i in picked] for row in rows],
    )


def sales_columns() -> list[Column]:
    return [
        Column(id="region", display_name="Region", is_aggregate=False),
        Column(id="city", display_name="City", is_aggregate=False),
        Column(id="sales", display_name="Sales", is_aggregate=True),
        Column(id="margin", display_name="Margin", is_aggregate=True),
    ]


def sales_rows() -> list[list]:
    return [
        ["North", "Oslo", 100, 10],
        ["North", "Bergen", 50, 5],
        ["South", "Rome", 25, 5],
        ["South", "Milan", 25, 0],
    ]


@pytest.fixture
def sales_table() -> Table:
    """region (2 distinct) -> city (4 distinct) -> sales (sum 200) -> margin (sum 20)."""
    return Table(columns=sales_columns(), rows=sales_rows())


@pytest.fixture
def table_factory():
    return make_table


@pytest.fixture
def store():
    from src.services.layout_store import InMemoryLayoutStore

    return InMemoryLayoutStore()


@pytest.fixture
def sync_service(store):
    from src.services.sync_service import GraphSyncService

    return GraphSyncService(store, debounce_seconds=0)
