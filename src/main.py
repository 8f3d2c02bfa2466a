"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import set_sync_service
from src.api.router import api_router
from src.config import Settings, get_settings
from src.graph.layout import LayoutSpacing
from src.services.layout_store import InMemoryLayoutStore, LayoutStore, RedisLayoutStore
from src.services.sync_service import GraphSyncService
from src.utils.exceptions import SessionNotFoundError
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def build_store(settings: Settings) -> LayoutStore:
    if settings.LAYOUT_STORE_BACKEND == "memory":
        return InMemoryLayoutStore()
    return RedisLayoutStore(settings.REDIS_URL, key_prefix=settings.LAYOUT_KEY_PREFIX)


def build_service(settings: Settings) -> GraphSyncService:
    spacing = LayoutSpacing(
        row_spacing=settings.ROW_SPACING,
        child_x_spacing=settings.CHILD_X_SPACING,
        child_y_offset=settings.CHILD_Y_OFFSET,
    )
    return GraphSyncService(
        build_store(settings),
        spacing=spacing,
        debounce_seconds=settings.PERSIST_DEBOUNCE_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    service = build_service(settings)
    set_sync_service(service)
    logger.info("app_started", store=settings.LAYOUT_STORE_BACKEND)
    yield

    # Shutdown: pending debounced writes must reach the store
    await service.close()
    set_sync_service(None)
    logger.info("app_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    application = FastAPI(
        title="Treeflow",
        description="Table-to-tree graph synchronization service",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(request: Request, exc: SessionNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": f"No session for visual {exc}"})

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    return application


app = create_app()
