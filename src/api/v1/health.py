"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_sync_service
from src.services.sync_service import GraphSyncService

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(service: GraphSyncService = Depends(get_sync_service)) -> dict:
    try:
        ok = await service.store_healthy()
        return {"status": "ready" if ok else "degraded", "layoutStore": ok}
    except Exception as exc:
        return {"status": "not_ready", "error": str(exc)}
