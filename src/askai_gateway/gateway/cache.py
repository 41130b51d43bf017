"""Response cache backends.

Two backends:
- In-memory dict with per-entry expiry (default, single process / tests)
- Redis (shared across workers and restarts) when ``cache_url`` is configured
"""
from __future__ import annotations
import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as aioredis

from askai_gateway.common.config import GatewayConfig

LOGGER = logging.getLogger("askai.gateway.cache")


class ResponseCache(Protocol):
    async def get(self, key: str) -> bytes | None: ...

    async def put(self, key: str, body: bytes, ttl: int) -> None: ...

    async def aclose(self) -> None: ...


class MemoryResponseCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, bytes]] = {}

    async def get(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, body = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return body

    async def put(self, key: str, body: bytes, ttl: int) -> None:
        if ttl <= 0:
            return
        self._entries[key] = (self._clock() + ttl, body)

    async def aclose(self) -> None:
        self._entries.clear()


class RedisResponseCache:
    def __init__(self, url: str) -> None:
        self._redis = aioredis.from_url(url)

    async def get(self, key: str) -> bytes | None:
        return await self._redis.get(key)

    async def put(self, key: str, body: bytes, ttl: int) -> None:
        if ttl <= 0:
            return
        await self._redis.set(key, body, ex=ttl)

    async def aclose(self) -> None:
        await self._redis.aclose()


def cache_from_config(config: GatewayConfig) -> ResponseCache:
    if config.cache_url:
        LOGGER.info("Using redis response cache")
        return RedisResponseCache(config.cache_url)
    return MemoryResponseCache()
