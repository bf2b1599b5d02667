"""Redis caching layer for GitHub responses."""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from repograph.utils.exceptions import CacheError
from repograph.utils.logging import get_logger

logger = get_logger(__name__)

_KEY_PREFIX = "repograph"


def cache_key(kind: str, owner: str, repo: str, limit: int | None = None) -> str:
    key = f"{_KEY_PREFIX}:{kind}:{owner.lower()}/{repo.lower()}"
    return f"{key}:{limit}" if limit is not None else key


class CacheService:
    """Redis-backed JSON cache. Raises ``CacheError`` on backend failures."""

    def __init__(self, redis_url: str, default_ttl: int = 300) -> None:
        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._default_ttl = default_ttl

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            raise CacheError(f"cache read failed for {key}: {exc}") from exc
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("cache_entry_corrupt", key=key)
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            await self._client.set(key, json.dumps(value), ex=ttl or self._default_ttl)
        except RedisError as exc:
            raise CacheError(f"cache write failed for {key}: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()
