"""Session owner: applies triggers, emits snapshots, persists save events."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from src.graph.layout import DEFAULT_SPACING, LayoutSpacing
from src.graph.serialization import LayoutBlob, dump_edges, dump_nodes, load_snapshot
from src.graph.state import Transition, Trigger, reduce
from src.models.schemas import Edge, Node, SessionState
from src.services.layout_store import LayoutStore
from src.utils.debounce import AsyncDebouncer
from src.utils.exceptions import LayoutStoreError, SessionNotFoundError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class RenderSink(ABC):
    """Drawing surface. Receives the node list before the edge list."""

    @abstractmethod
    def on_nodes(self, visual_id: str, nodes: list[Node]) -> None: ...

    @abstractmethod
    def on_edges(self, visual_id: str, edges: list[Edge]) -> None: ...


class LayoutWriter:
    """Debounced writes of one visual's `nodePositions` and `edgeList`."""

    def __init__(self, store: LayoutStore, visual_id: str, delay: float) -> None:
        self._store = store
        self._visual_id = visual_id
        self.nodes = AsyncDebouncer(delay, self._write_nodes)
        self.edges = AsyncDebouncer(delay, self._write_edges)

    async def _write_nodes(self, payload: str) -> None:
        await self._store.merge(self._visual_id, LayoutBlob(node_positions=payload).to_mapping())

    async def _write_edges(self, payload: str) -> None:
        await self._store.merge(self._visual_id, LayoutBlob(edge_list=payload).to_mapping())

    async def flush(self) -> None:
        try:
            await self.nodes.flush()
        finally:
            await self.edges.flush()


class GraphSyncService:
    """Owns one SessionState per visual and runs triggers against it one at a time."""

    def __init__(
        self,
        store: LayoutStore,
        *,
        spacing: LayoutSpacing = DEFAULT_SPACING,
        debounce_seconds: float = 0.5,
    ) -> None:
        self._store = store
        self._spacing = spacing
        self._debounce = debounce_seconds
        self._sessions: dict[str, SessionState] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._writers: dict[str, LayoutWriter] = {}
        self._sinks: list[RenderSink] = []

    def add_sink(self, sink: RenderSink) -> None:
        self._sinks.append(sink)

    def get_session(self, visual_id: str) -> SessionState:
        try:
            return self._sessions[visual_id]
        except KeyError:
            raise SessionNotFoundError(visual_id) from None

    async def open_session(self, visual_id: str) -> SessionState:
        """Existing session, or a new one seeded from the stored layout."""
        async with self._lock(visual_id):
            return await self._ensure_session(visual_id)

    async def apply(self, visual_id: str, trigger: Trigger) -> Transition:
        async with self._lock(visual_id):
            state = await self._ensure_session(visual_id)
            transition = reduce(state, trigger, self._spacing)
            self._sessions[visual_id] = transition.state
            if transition.snapshot is not None:
                self._emit(visual_id, transition)
            return transition

    async def flush(self, visual_id: str | None = None) -> list[str]:
        """Write pending layout changes now (one visual, or all).

        A failing write is logged and skipped so the remaining visuals still
        flush. Returns the ids whose write failed.
        """
        targets = [visual_id] if visual_id else list(self._writers)
        failed: list[str] = []
        for vid in targets:
            writer = self._writers.get(vid)
            if writer is None:
                continue
            try:
                await writer.flush()
            except LayoutStoreError as exc:
                logger.error("layout_flush_failed", visual_id=vid, error=str(exc))
                failed.append(vid)
        return failed

    async def close_session(self, visual_id: str) -> bool:
        """Flush and forget one visual. False if no session was open."""
        async with self._lock(visual_id):
            await self.flush(visual_id)
            existed = self._sessions.pop(visual_id, None) is not None
            self._writers.pop(visual_id, None)
        lock = self._locks.get(visual_id)
        if lock is not None and not lock.locked():
            del self._locks[visual_id]
        if existed:
            logger.info("session_closed", visual_id=visual_id)
        return existed

    async def store_healthy(self) -> bool:
        return await self._store.health_check()

    async def close(self) -> None:
        try:
            await self.flush()
        finally:
            await self._store.close()

    def _lock(self, visual_id: str) -> asyncio.Lock:
        return self._locks.setdefault(visual_id, asyncio.Lock())

    async def _ensure_session(self, visual_id: str) -> SessionState:
        state = self._sessions.get(visual_id)
        if state is not None:
            return state
        try:
            blob = await self._store.read(visual_id)
        except LayoutStoreError as exc:
            logger.warning("layout_read_failed", visual_id=visual_id, error=str(exc))
            blob = None
        state = SessionState(persisted=load_snapshot(blob))
        self._sessions[visual_id] = state
        logger.info(
            "session_opened",
            visual_id=visual_id,
            saved_nodes=len(state.persisted.nodes),
            saved_edges=len(state.persisted.edges),
        )
        return state

    def _writer(self, visual_id: str) -> LayoutWriter:
        writer = self._writers.get(visual_id)
        if writer is None:
            writer = LayoutWriter(self._store, visual_id, self._debounce)
            self._writers[visual_id] = writer
        return writer

    def _emit(self, visual_id: str, transition: Transition) -> None:
        snapshot = transition.snapshot
        if snapshot is None:
            return
        for sink in self._sinks:
            sink.on_nodes(visual_id, snapshot.nodes)
        for sink in self._sinks:
            sink.on_edges(visual_id, snapshot.edges)

        persist = transition.persist
        if persist.nodes:
            self._writer(visual_id).nodes.submit(dump_nodes(snapshot.nodes))
        if persist.edges:
            self._writer(visual_id).edges.submit(dump_edges(snapshot.edges))
