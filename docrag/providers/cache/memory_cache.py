"""In-memory cache provider using cachetools.TTLCache.

Backs the embedding service's vector memo.  Entries expire after a uniform
TTL and the least-recently-used entry is evicted once ``max_size`` is hit.
"""

from __future__ import annotations

from typing import Any

import structlog
from cachetools import TTLCache

from docrag.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before eviction.
    ttl:
        Time-to-live in seconds for every entry.
    """

    def __init__(self, max_size: int = 2048, ttl: int = 3600) -> None:
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        value = self._cache.get(key)
        if value is not None:
            logger.debug("cache_hit", key=key)
        else:
            logger.debug("cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any) -> None:
        self._cache[key] = value
        logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    async def clear(self) -> None:
        self._cache.clear()
        logger.debug("cache_cleared")

    def size(self) -> int:
        return len(self._cache)
