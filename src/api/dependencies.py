"""Shared FastAPI dependency injection."""

from __future__ import annotations

from src.services.sync_service import GraphSyncService

_sync_service: GraphSyncService | None = None


def set_sync_service(service: GraphSyncService | None) -> None:
    global _sync_service
    _sync_service = service


def get_sync_service() -> GraphSyncService:
    if _sync_service is None:
        raise RuntimeError("Graph sync service not initialized")
    return _sync_service
