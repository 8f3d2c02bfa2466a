"""Layout blob storage: one `layout` object per visual."""

from __future__ import annotations

from abc import ABC, abstractmethod

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.graph.serialization import LAYOUT_OBJECT_NAME, LayoutBlob
from src.utils.exceptions import LayoutStoreError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class LayoutStore(ABC):
    """Read/merge access to a visual's persisted layout properties."""

    @abstractmethod
    async def read(self, visual_id: str) -> LayoutBlob | None:
        """Stored blob, or None when nothing was ever saved."""
        ...

    @abstractmethod
    async def merge(self, visual_id: str, properties: dict[str, str]) -> None:
        """Overwrite only the given properties, leaving the others intact."""
        ...

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemoryLayoutStore(LayoutStore):
    def __init__(self) -> None:
        self._objects: dict[str, dict[str, str]] = {}

    async def read(self, visual_id: str) -> LayoutBlob | None:
        raw = self._objects.get(visual_id)
        if raw is None:
            return None
        return LayoutBlob.from_mapping(raw)

    async def merge(self, visual_id: str, properties: dict[str, str]) -> None:
        self._objects.setdefault(visual_id, {}).update(properties)


class RedisLayoutStore(LayoutStore):
    """Redis hash per visual under `{prefix}:{visual_id}:layout`."""

    def __init__(self, redis_url: str, key_prefix: str = "treeflow") -> None:
        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._prefix = key_prefix

    def key(self, visual_id: str) -> str:
        return f"{self._prefix}:{visual_id}:{LAYOUT_OBJECT_NAME}"

    async def read(self, visual_id: str) -> LayoutBlob | None:
        try:
            raw = await self._client.hgetall(self.key(visual_id))
        except RedisError as exc:
            raise LayoutStoreError(f"read failed for {visual_id}: {exc}") from exc
        if not raw:
            return None
        return LayoutBlob.from_mapping(raw)

    async def merge(self, visual_id: str, properties: dict[str, str]) -> None:
        if not properties:
            return
        try:
            await self._client.hset(self.key(visual_id), mapping=properties)
        except RedisError as exc:
            raise LayoutStoreError(f"write failed for {visual_id}: {exc}") from exc
        logger.debug("layout_written", visual_id=visual_id, fields=sorted(properties))

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            logger.warning("layout_store_unhealthy", error=str(exc))
            return False

    async def close(self) -> None:
        await self._client.aclose()
