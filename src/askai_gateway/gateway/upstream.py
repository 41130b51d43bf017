"""Client for the fixed summary upstream.

One POST per chat completion, no retries. Failures are mapped into the
gateway error taxonomy before they leave this module.
"""
from __future__ import annotations
import logging
from collections.abc import Sequence

import httpx

from askai_gateway.common.config import GatewayConfig
from askai_gateway.common.errors import (
    InvalidRequestError,
    UpstreamContractError,
    UpstreamError,
    UpstreamParseError,
    UpstreamTransportError,
)
from askai_gateway.common.schema import (
    ChatMessage,
    Summary,
    UpstreamFailure,
    UpstreamPayload,
    UpstreamResult,
)

LOGGER = logging.getLogger("askai.gateway.upstream")

UPSTREAM_HEADERS = {
    "accept": "*/*",
    "accept-language": "zh-CN,zh;q=0.9,en;q=0.8",
    "content-type": "application/json",
    "origin": "https://askaiquestions.net",
    "referer": "https://askaiquestions.net/",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
    ),
}


class UpstreamClient:
    def __init__(self, config: GatewayConfig, http: httpx.AsyncClient) -> None:
        self._url = config.upstream_url
        self._website = config.upstream_website
        self._http = http

    def build_payload(self, messages: Sequence[ChatMessage]) -> UpstreamPayload:
        return UpstreamPayload(
            website=self._website,
            messages=[m.model_dump(exclude_none=True) for m in messages],
        )

    async def fetch(self, messages: Sequence[ChatMessage], request_id: str) -> UpstreamResult:
        """
        Issue the single upstream call.

        Returns:
            ``Summary`` on success, ``UpstreamFailure`` for a non-2xx reply.

        Raises:
            UpstreamTransportError: network-level failure.
            UpstreamParseError: body is not JSON.
            UpstreamContractError: body has no string ``summary``.
        """
        payload = self.build_payload(messages)
        headers = {**UPSTREAM_HEADERS, "X-Request-ID": request_id}
        try:
            r = await self._http.post(self._url, headers=headers, json=payload.model_dump())
        except httpx.HTTPError as e:
            LOGGER.error("[%s] upstream request failed: %s", request_id, e)
            raise UpstreamTransportError(f"Internal server error: {e}") from e

        if not r.is_success:
            LOGGER.error("[%s] upstream error %s: %s", request_id, r.status_code, r.text)
            return UpstreamFailure(status_code=r.status_code, body=r.text)

        try:
            data = r.json()
        except ValueError as e:
            LOGGER.error("[%s] upstream returned non-JSON body: %s", request_id, e)
            raise UpstreamParseError("Unable to parse upstream response") from e

        summary = data.get("summary") if isinstance(data, dict) else None
        if not isinstance(summary, str):
            LOGGER.error("[%s] upstream reply has no string 'summary': %r", request_id, data)
            raise UpstreamContractError(
                "Upstream response is missing the 'summary' field or it is not a string"
            )
        return Summary(text=summary)

    async def summarize(self, messages: Sequence[ChatMessage], request_id: str) -> str:
        """Validate the messages, call the upstream and return the summary text."""
        if not messages:
            raise InvalidRequestError("Request body is missing the 'messages' field")

        result = await self.fetch(messages, request_id)
        if isinstance(result, UpstreamFailure):
            raise UpstreamError(result.status_code, result.body)
        LOGGER.info("[%s] upstream summary received (%d chars)", request_id, len(result.text))
        return result.text
