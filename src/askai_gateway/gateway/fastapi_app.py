"""FastAPI app exposing the OpenAI-compatible surface.

Endpoints:
- GET /                      landing page
- GET /v1/models             model catalog (cached)
- POST /v1/chat/completions  { "model": "...", "messages": [...], "stream": bool }

Everything under /v1/ requires ``Authorization: Bearer <api_master_key>``.
"""
from __future__ import annotations
import html
import logging
import secrets
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from askai_gateway.common.config import GatewayConfig, load_config
from askai_gateway.common.errors import (
    AuthenticationError,
    GatewayError,
    InternalServerError,
    InvalidRequestError,
    NotFoundError,
)
from askai_gateway.common.schema import ChatRequest
from askai_gateway.common.templates import load_template, render_page
from askai_gateway.gateway.cache import ResponseCache, cache_from_config
from askai_gateway.gateway.catalog import ModelCatalog
from askai_gateway.gateway.shaper import shape_response
from askai_gateway.gateway.streaming import PseudoStreamEmitter
from askai_gateway.gateway.upstream import UpstreamClient

LOGGER = logging.getLogger("askai.gateway.app")

REQUEST_ID_HEADER = "X-Request-ID"
STREAM_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


def error_response(exc: GatewayError) -> JSONResponse:
    return JSONResponse(exc.to_envelope(), status_code=exc.status_code)


def check_bearer(authorization: str | None, secret: str) -> None:
    """Raise ``AuthenticationError`` unless the header is exactly ``Bearer <secret>``."""
    if (
        not authorization
        or not authorization.startswith("Bearer ")
        or not secrets.compare_digest(authorization[7:].encode(), secret.encode())
    ):
        raise AuthenticationError(
            'Invalid credentials. Provide a valid API key as "Authorization: Bearer YOUR_KEY"'
        )


def create_app(
    config: GatewayConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    cache: ResponseCache | None = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        config: Gateway settings; loaded from file/env when omitted.
        transport: Optional httpx transport for the upstream client.
        cache: Response cache for the model catalog; chosen from config when omitted.
    """
    cfg = config or load_config()

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        http = httpx.AsyncClient(
            transport=transport,
            timeout=cfg.upstream_timeout,
            follow_redirects=True,
        )
        response_cache = cache if cache is not None else cache_from_config(cfg)
        application.state.upstream = UpstreamClient(cfg, http)
        application.state.catalog = ModelCatalog(cfg, response_cache)
        LOGGER.info(
            "%s %s ready; upstream=%s models=%s",
            cfg.project_name,
            cfg.project_version,
            cfg.upstream_url,
            ",".join(cfg.known_models),
        )
        try:
            yield
        finally:
            await http.aclose()
            await response_cache.aclose()

    app = FastAPI(title=cfg.project_name, version=cfg.project_version, lifespan=lifespan)
    app.state.config = cfg

    @app.middleware("http")
    async def gate(request: Request, call_next) -> Response:  # noqa: ANN001
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        try:
            if request.url.path.startswith("/v1/"):
                check_bearer(request.headers.get("Authorization"), cfg.api_master_key)
            response = await call_next(request)
        except GatewayError as e:
            LOGGER.warning("[%s] %s %s -> %s", request_id, request.method, request.url.path, e.status_code)
            response = error_response(e)
        except Exception as e:
            LOGGER.exception("[%s] unhandled error on %s %s", request_id, request.method, request.url.path)
            response = error_response(InternalServerError(f"Internal server error: {e}"))
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(GatewayError)
    async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        LOGGER.warning("[%s] %s: %s", request.state.request_id, type(exc).__name__, exc.message)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in errors[:3]
        )
        return error_response(InvalidRequestError(f"Invalid request body: {detail}"))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            return error_response(
                NotFoundError(f"Endpoint not found: {request.method} {request.url.path}")
            )
        return error_response(InvalidRequestError(str(exc.detail), status_code=exc.status_code))

    @app.get("/", response_class=HTMLResponse)
    async def landing(request: Request) -> HTMLResponse:
        base = str(request.base_url).rstrip("/")
        values = {
            "PROJECT_NAME": cfg.project_name,
            "PROJECT_VERSION": cfg.project_version,
            "API_ENDPOINT": f"{base}/v1/chat/completions",
            "MODELS_ENDPOINT": f"{base}/v1/models",
            "DEFAULT_MODEL": cfg.default_model,
        }
        page = render_page(load_template(), {k: html.escape(v) for k, v in values.items()})
        return HTMLResponse(page)

    @app.get("/v1/models")
    async def list_models(request: Request) -> Response:
        catalog: ModelCatalog = request.app.state.catalog
        return await catalog.respond(request)

    @app.post("/v1/chat/completions")
    async def chat_completions(body: ChatRequest, request: Request) -> Response:
        request_id: str = request.state.request_id
        upstream: UpstreamClient = request.app.state.upstream
        model = body.model or cfg.default_model

        summary = await upstream.summarize(body.messages, request_id)
        shaped = shape_response(summary, request_id, model, bool(body.stream), cfg)
        if isinstance(shaped, PseudoStreamEmitter):
            return StreamingResponse(
                shaped.stream(),
                media_type="text/event-stream",
                headers=STREAM_HEADERS,
            )
        return JSONResponse(shaped.model_dump())

    return app
