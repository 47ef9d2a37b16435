"""Redis caching layer for Semantic Scholar responses."""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis

from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)


class CacheService:
    """Redis-backed JSON cache. Read and write failures are logged and treated as misses."""

    def __init__(self, redis_url: str, default_ttl: int = 3600) -> None:
        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._default_ttl = default_ttl

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except Exception as exc:
            logger.warning("cache_read_failed", key=key, error=str(exc))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        serialized = json.dumps(value) if not isinstance(value, str) else value
        try:
            await self._client.set(key, serialized, ex=ttl or self._default_ttl)
        except Exception as exc:
            logger.warning("cache_write_failed", key=key, error=str(exc))

    async def get_papers(self, key: str) -> list[dict] | None:
        cached = await self.get(f"s2:{key}")
        return cached if isinstance(cached, list) else None

    async def set_papers(self, key: str, papers: list[dict]) -> None:
        await self.set(f"s2:{key}", papers)

    async def close(self) -> None:
        await self._client.aclose()
