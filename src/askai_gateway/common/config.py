"""Gateway configuration.

Settings are read once at startup (YAML file, then ``GATEWAY_*`` environment
overrides) into an immutable :class:`GatewayConfig` that is handed to each
component when it is constructed.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

DEFAULT_UPSTREAM_URL = "https://pjfuothbq9.execute-api.us-east-1.amazonaws.com/get-summary"
DEFAULT_MODEL = "askai-default-model"


@dataclass(frozen=True)
class GatewayConfig:
    project_name: str = "askai-gateway"
    project_version: str = "1.0.0"
    api_master_key: str = "sk-askai-default-key-please-change-me"
    upstream_url: str = DEFAULT_UPSTREAM_URL
    upstream_website: str = "ask-ai-questions"
    upstream_timeout: float = 60.0
    default_model: str = DEFAULT_MODEL
    known_models: tuple[str, ...] = field(default=(DEFAULT_MODEL,))
    model_owner: str = "askai-project"
    stream_chunk_size: int = 2
    stream_delay_ms: float = 2.0
    models_cache_ttl: int = 3600
    cache_url: str | None = None
    log_level: str = "INFO"

    def validated(self) -> GatewayConfig:
        """Return a checked copy; the default model is always part of the catalog."""
        if not self.api_master_key:
            raise ValueError("api_master_key must not be empty")
        if not self.upstream_url:
            raise ValueError("upstream_url must not be empty")
        if not self.default_model:
            raise ValueError("default_model must not be empty")
        if self.stream_chunk_size < 1:
            raise ValueError(f"stream_chunk_size must be >= 1, got {self.stream_chunk_size}")
        if self.stream_delay_ms < 0:
            raise ValueError(f"stream_delay_ms must be >= 0, got {self.stream_delay_ms}")
        if self.models_cache_ttl < 0:
            raise ValueError(f"models_cache_ttl must be >= 0, got {self.models_cache_ttl}")
        models = tuple(self.known_models)
        if self.default_model not in models:
            models = models + (self.default_model,)
        return replace(self, known_models=models)


# env var -> (field, converter)
_ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
    "GATEWAY_API_KEY": ("api_master_key", str),
    "GATEWAY_UPSTREAM_URL": ("upstream_url", str),
    "GATEWAY_UPSTREAM_TIMEOUT": ("upstream_timeout", float),
    "GATEWAY_DEFAULT_MODEL": ("default_model", str),
    "GATEWAY_KNOWN_MODELS": ("known_models", lambda v: tuple(m.strip() for m in v.split(",") if m.strip())),
    "GATEWAY_STREAM_CHUNK_SIZE": ("stream_chunk_size", int),
    "GATEWAY_STREAM_DELAY_MS": ("stream_delay_ms", float),
    "GATEWAY_MODELS_CACHE_TTL": ("models_cache_ttl", int),
    "GATEWAY_CACHE_URL": ("cache_url", lambda v: v or None),
    "GATEWAY_LOG_LEVEL": ("log_level", str),
}


def load_cfg(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: str | Path | None = None, environ: dict[str, str] | None = None) -> GatewayConfig:
    """
    Build the gateway configuration.

    Args:
        path: Optional YAML file; falls back to ``$GATEWAY_CONFIG`` when unset.
        environ: Environment mapping, ``os.environ`` by default.

    Returns:
        Validated, immutable configuration.
    """
    env = os.environ if environ is None else environ
    path = path or env.get("GATEWAY_CONFIG")

    values: dict[str, Any] = {}
    if path:
        values.update(load_cfg(path))

    known = set(GatewayConfig.__dataclass_fields__)
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    if "known_models" in values:
        values["known_models"] = tuple(values["known_models"] or ())

    for var, (name, convert) in _ENV_OVERRIDES.items():
        raw = env.get(var)
        if raw is None:
            continue
        try:
            values[name] = convert(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {var}: {raw!r}") from e

    return GatewayConfig(**values).validated()
