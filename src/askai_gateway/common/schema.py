"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def _now() -> int:
    return int(time.time())


class ChatMessage(BaseModel):
    """One chat turn; unknown keys are kept so they reach the upstream untouched."""
    model_config = ConfigDict(extra="allow")

    role: str
    content: str | list[dict[str, Any]] | None = None


class ChatRequest(BaseModel):
    model: str | None = None
    messages: list[ChatMessage] = Field(default_factory=list)
    stream: bool | None = False


class UpstreamPayload(BaseModel):
    website: str
    messages: list[dict[str, Any]]


@dataclass(frozen=True)
class Summary:
    """Successful upstream reply."""
    text: str


@dataclass(frozen=True)
class UpstreamFailure:
    """Non-success upstream HTTP reply."""
    status_code: int
    body: str


UpstreamResult = Summary | UpstreamFailure


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class CompletionChoice(BaseModel):
    index: int = 0
    message: AssistantMessage
    finish_reason: Literal["stop"] = "stop"


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int = Field(default_factory=_now)
    model: str
    choices: list[CompletionChoice]
    usage: Usage = Field(default_factory=Usage)


class ChunkChoice(BaseModel):
    index: int = 0
    delta: dict[str, str] = Field(default_factory=dict)
    finish_reason: Literal["stop"] | None = None


class CompletionChunk(BaseModel):
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int = Field(default_factory=_now)
    model: str
    choices: list[ChunkChoice]

    @classmethod
    def content(cls, request_id: str, model: str, text: str) -> CompletionChunk:
        return cls(id=request_id, model=model, choices=[ChunkChoice(delta={"content": text})])

    @classmethod
    def stop(cls, request_id: str, model: str, text: str | None = None) -> CompletionChunk:
        """Terminal chunk; ``text`` is only set when an error is folded into the stream."""
        delta = {"content": text} if text is not None else {}
        return cls(id=request_id, model=model, choices=[ChunkChoice(delta=delta, finish_reason="stop")])


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int = Field(default_factory=_now)
    owned_by: str


class ModelListResponse(BaseModel):
    object: Literal["list"] = "list"
    data: list[ModelCard]
