"""Pseudo-streaming of an already complete text as OpenAI chunk frames.

The upstream returns the whole summary at once; this module slices it into
fixed-size pieces and replays them as ``chat.completion.chunk`` SSE records
with a short pause between pieces, followed by a stop chunk and ``[DONE]``.
"""
from __future__ import annotations
import asyncio
import logging
from collections.abc import AsyncIterator, Iterator
from typing import NamedTuple

from pydantic import BaseModel

from askai_gateway.common.schema import CompletionChunk

LOGGER = logging.getLogger("askai.gateway.stream")

DONE_FRAME = "data: [DONE]\n\n"


class Frame(NamedTuple):
    data: str
    paced: bool  # emitter pauses after paced frames


def iter_slices(text: str, size: int) -> Iterator[str]:
    """Yield consecutive ``size``-character slices of ``text``; the last may be shorter."""
    if size < 1:
        raise ValueError(f"slice size must be >= 1, got {size}")
    for i in range(0, len(text), size):
        yield text[i:i + size]


def sse_frame(obj: BaseModel) -> str:
    return f"data: {obj.model_dump_json()}\n\n"


class PseudoStreamEmitter:
    """Single-use emitter of the SSE frames for one request."""

    def __init__(
        self,
        text: str,
        request_id: str,
        model: str,
        *,
        chunk_size: int,
        delay_ms: float = 0.0,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.text = text
        self.request_id = request_id
        self.model = model
        self.chunk_size = chunk_size
        self.delay_ms = delay_ms
        self._started = False

    def _claim(self) -> None:
        if self._started:
            raise RuntimeError("PseudoStreamEmitter can only be consumed once")
        self._started = True

    def _frames(self) -> Iterator[Frame]:
        try:
            for piece in iter_slices(self.text, self.chunk_size):
                chunk = CompletionChunk.content(self.request_id, self.model, piece)
                yield Frame(sse_frame(chunk), paced=True)
            yield Frame(sse_frame(CompletionChunk.stop(self.request_id, self.model)), paced=False)
        except Exception as e:
            LOGGER.error("[%s] stream generation failed: %s", self.request_id, e)
            error_chunk = CompletionChunk.stop(
                self.request_id, self.model, f"\n\n[gateway error: {e}]"
            )
            yield Frame(sse_frame(error_chunk), paced=False)
        yield Frame(DONE_FRAME, paced=False)

    def frames(self) -> Iterator[Frame]:
        """Lazy frame sequence without pacing, for synchronous consumers."""
        self._claim()
        return self._frames()

    def __iter__(self) -> Iterator[str]:
        return (frame.data for frame in self.frames())

    async def stream(self) -> AsyncIterator[str]:
        """Yield SSE records, sleeping ``delay_ms`` after each content record."""
        frames = self.frames()
        delay = self.delay_ms / 1000
        sent = 0
        try:
            for frame in frames:
                yield frame.data
                sent += 1
                if frame.paced and delay > 0:
                    await asyncio.sleep(delay)
        except asyncio.CancelledError:
            LOGGER.info("[%s] client went away after %d frames", self.request_id, sent)
            raise
        finally:
            frames.close()
