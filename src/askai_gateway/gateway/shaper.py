"""Shape an upstream summary into an OpenAI chat completion or a pseudo-stream."""
from __future__ import annotations

from askai_gateway.common.config import GatewayConfig
from askai_gateway.common.schema import AssistantMessage, CompletionChoice, CompletionResponse
from askai_gateway.gateway.streaming import PseudoStreamEmitter


def build_completion(summary: str, request_id: str, model: str) -> CompletionResponse:
    return CompletionResponse(
        id=request_id,
        model=model,
        choices=[CompletionChoice(message=AssistantMessage(content=summary))],
    )


def shape_response(
    summary: str,
    request_id: str,
    model: str,
    stream_requested: bool,
    config: GatewayConfig,
) -> CompletionResponse | PseudoStreamEmitter:
    """
    Pick the reply form for a summary.

    Args:
        summary: Upstream text, already checked to be a string.
        request_id: Correlation id used as the object id.
        model: Model name echoed back to the caller.
        stream_requested: Whether the caller asked for ``stream: true``.
        config: Supplies the pseudo-stream chunk size and pacing.
    """
    if stream_requested:
        return PseudoStreamEmitter(
            summary,
            request_id,
            model,
            chunk_size=config.stream_chunk_size,
            delay_ms=config.stream_delay_ms,
        )
    return build_completion(summary, request_id, model)
