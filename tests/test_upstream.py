from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from askai_gateway.common.config import GatewayConfig
from askai_gateway.common.errors import (
    InvalidRequestError,
    UpstreamContractError,
    UpstreamError,
    UpstreamParseError,
    UpstreamTransportError,
)
from askai_gateway.common.schema import ChatMessage, Summary, UpstreamFailure
from askai_gateway.gateway.upstream import UpstreamClient

MESSAGES = [ChatMessage(role="user", content="hi")]


def _call(handler: Callable[[httpx.Request], httpx.Response], method: str, messages: Any = MESSAGES) -> Any:
    async def go() -> Any:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = UpstreamClient(GatewayConfig(), http)
            return await getattr(client, method)(messages, "req-42")

    return asyncio.run(go())


def test_fetch_returns_summary() -> None:
    result = _call(lambda r: httpx.Response(200, json={"summary": "hello there"}), "fetch")
    assert result == Summary(text="hello there")


def test_fetch_maps_non_success_to_failure() -> None:
    result = _call(lambda r: httpx.Response(503, text="busy"), "fetch")
    assert result == UpstreamFailure(status_code=503, body="busy")


def test_summarize_raises_upstream_error_with_status() -> None:
    with pytest.raises(UpstreamError) as info:
        _call(lambda r: httpx.Response(500, text="boom"), "summarize")
    err = info.value
    assert err.status_code == 500
    assert err.to_envelope() == {
        "error": {"message": "Upstream service error: boom", "type": "api_error", "code": "upstream_500"}
    }


def test_error_body_mentioning_json_is_not_a_parse_error() -> None:
    with pytest.raises(UpstreamError) as info:
        _call(lambda r: httpx.Response(400, text="invalid JSON in request"), "summarize")
    assert info.value.code == "upstream_400"


def test_non_json_success_is_parse_error() -> None:
    with pytest.raises(UpstreamParseError) as info:
        _call(lambda r: httpx.Response(200, text="not json"), "summarize")
    assert info.value.status_code == 502


@pytest.mark.parametrize("body", [{}, {"summary": None}, {"summary": ["a"]}, "plain string"])
def test_missing_summary_is_contract_error(body: Any) -> None:
    with pytest.raises(UpstreamContractError) as info:
        _call(lambda r: httpx.Response(200, json=body), "summarize")
    assert info.value.status_code == 502


def test_transport_failure_is_bad_gateway() -> None:
    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamTransportError) as info:
        _call(fail, "summarize")
    assert info.value.status_code == 502


def test_empty_messages_skip_the_network() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"summary": "x"})

    with pytest.raises(InvalidRequestError):
        _call(handler, "summarize", messages=[])
    assert calls == []


def test_payload_keeps_extra_message_fields() -> None:
    client = UpstreamClient(GatewayConfig(upstream_website="site"), http=None)  # type: ignore[arg-type]
    payload = client.build_payload([ChatMessage(role="user", content="hi", name="alice")])
    assert payload.model_dump() == {
        "website": "site",
        "messages": [{"role": "user", "content": "hi", "name": "alice"}],
    }
