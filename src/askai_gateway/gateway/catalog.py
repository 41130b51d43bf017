"""Static model catalog served from an edge-style response cache.

The cache key covers method, full URL and every request header, credentials
included, so a cached listing is never replayed to a different auth context.
"""
from __future__ import annotations
import hashlib
import json
import logging

from fastapi import Request, Response
from starlette.background import BackgroundTask

from askai_gateway.common.config import GatewayConfig
from askai_gateway.common.schema import ModelCard, ModelListResponse
from askai_gateway.gateway.cache import ResponseCache

LOGGER = logging.getLogger("askai.gateway.catalog")

CACHE_STATUS_HEADER = "X-Cache-Status"


class ModelCatalog:
    def __init__(self, config: GatewayConfig, cache: ResponseCache) -> None:
        self._models = config.known_models
        self._owner = config.model_owner
        self._ttl = config.models_cache_ttl
        self._cache = cache

    def build(self) -> ModelListResponse:
        return ModelListResponse(
            data=[ModelCard(id=name, owned_by=self._owner) for name in self._models]
        )

    @staticmethod
    def cache_key(request: Request) -> str:
        raw = json.dumps(
            {
                "method": request.method,
                "url": str(request.url),
                "headers": sorted(request.headers.items()),
            },
            sort_keys=True,
        )
        return f"models_cache:{hashlib.sha256(raw.encode()).hexdigest()}"

    def _headers(self, status: str) -> dict[str, str]:
        return {
            CACHE_STATUS_HEADER: status,
            "Cache-Control": f"public, max-age={self._ttl}",
        }

    async def _lookup(self, key: str) -> bytes | None:
        try:
            return await self._cache.get(key)
        except Exception as e:
            LOGGER.warning("Model cache read failed, serving fresh: %s", e)
            return None

    async def _populate(self, key: str, body: bytes) -> None:
        try:
            await self._cache.put(key, body, self._ttl)
        except Exception as e:
            LOGGER.warning("Model cache write failed: %s", e)

    async def respond(self, request: Request) -> Response:
        """Serve the listing; on a miss the cache is filled after the response is sent."""
        key = self.cache_key(request)
        cached = await self._lookup(key)
        if cached is not None:
            LOGGER.debug("Model cache HIT for key %s", key[13:29])
            return Response(cached, media_type="application/json", headers=self._headers("HIT"))

        LOGGER.debug("Model cache MISS for key %s", key[13:29])
        body = self.build().model_dump_json().encode()
        return Response(
            body,
            media_type="application/json",
            headers=self._headers("MISS"),
            background=BackgroundTask(self._populate, key, body),
        )
