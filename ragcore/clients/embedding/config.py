"""Embedding configuration: provider, credential, model, batching and chunking sizes."""
from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ragcore.config.secrets import is_credential, mask_api_key
from ragcore.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class EmbeddingProvider(str, Enum):
    """Supported embedding backends. Each member has a builder in the registry."""

    OPENAI = "openai"
    AZURE = "azure"
    LOCAL = "local"
    ALIYUN = "aliyun"
    GEMINI = "gemini"


# Placeholder sent to keyless local OpenAI-compatible servers.
LOCAL_API_KEY = "local"


@dataclass(frozen=True)
class EmbeddingConfig:
    """Fully resolved embedding settings. Passed explicitly on every call."""

    provider: EmbeddingProvider = EmbeddingProvider.OPENAI
    base_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    model: str = "text-embedding-3-small"
    dimensions: int = 1536
    batch_size: int = 100
    # Chunking sizes are in estimated tokens
    chunk_size: int = 512
    chunk_overlap: int = 100
    timeout: float = 60.0

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "provider", EmbeddingProvider(self.provider))
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown embedding provider: {self.provider!r}",
                details={"supported": [p.value for p in EmbeddingProvider]},
            ) from exc
        if not self.model or not self.model.strip():
            raise ConfigurationError("Embedding model name must be non-empty")
        for name in ("dimensions", "batch_size", "chunk_size"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.chunk_overlap, int) or self.chunk_overlap < 0:
            raise ConfigurationError(f"chunk_overlap must be a non-negative integer, got {self.chunk_overlap!r}")
        if self.chunk_overlap >= self.chunk_size:
            raise ConfigurationError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout!r}")

    @property
    def has_credential(self) -> bool:
        if self.provider is EmbeddingProvider.LOCAL:
            return True
        return is_credential(self.api_key)

    @property
    def resolved_api_key(self) -> str:
        if is_credential(self.api_key):
            return self.api_key.strip()
        if self.provider is EmbeddingProvider.LOCAL:
            return LOCAL_API_KEY
        raise ConfigurationError(
            "Embedding API key is not configured",
            details={"provider": self.provider.value},
        )

    def to_dict(self, *, mask: bool = True) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["provider"] = self.provider.value
        if mask:
            data["api_key"] = mask_api_key(self.api_key)
        return data


DEFAULT_EMBEDDING_CONFIG = EmbeddingConfig()

# Persisted settings use the camelCase keys of the settings UI.
_ALIASES: Dict[str, str] = {
    "baseUrl": "base_url",
    "apiKey": "api_key",
    "batchSize": "batch_size",
    "chunkSize": "chunk_size",
    "chunkOverlap": "chunk_overlap",
}
_FIELDS = {f.name: f.type for f in dataclasses.fields(EmbeddingConfig)}
_INT_FIELDS = ("dimensions", "batch_size", "chunk_size", "chunk_overlap")

_ENV_VARS: Dict[str, str] = {
    "provider": "EMBEDDING_PROVIDER",
    "base_url": "EMBEDDING_BASE_URL",
    "api_key": "EMBEDDING_API_KEY",
    "model": "EMBEDDING_MODEL",
    "dimensions": "EMBEDDING_DIMENSIONS",
    "batch_size": "EMBEDDING_BATCH_SIZE",
    "chunk_size": "EMBEDDING_CHUNK_SIZE",
    "chunk_overlap": "EMBEDDING_CHUNK_OVERLAP",
    "timeout": "EMBEDDING_TIMEOUT",
}


def _coerce(name: str, value: Any) -> Any:
    try:
        if name in _INT_FIELDS:
            return int(value)
        if name == "timeout":
            return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}", cause=exc) from exc
    return value


def _normalize(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in overrides.items():
        name = _ALIASES.get(key, key)
        if name not in _FIELDS:
            logger.debug("Ignoring unknown embedding setting %r", key)
            continue
        if value is None:
            continue
        if name == "api_key" and not is_credential(value):
            # Masked or blank keys never replace a real one
            continue
        out[name] = _coerce(name, value)
    return out


def load_embedding_config(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    defaults: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG,
) -> EmbeddingConfig:
    """
    Resolve the embedding config: defaults <- environment <- persisted overrides.

    ``overrides`` is the flat record stored by the settings screen; both
    snake_case and camelCase keys are accepted.
    """
    env = os.environ if environ is None else environ
    from_env: Dict[str, Any] = {}
    for name, var in _ENV_VARS.items():
        raw = env.get(var)
        if raw is not None and raw.strip():
            from_env[name] = raw.strip()
    if "api_key" not in from_env and env.get("OPENAI_API_KEY"):
        from_env["api_key"] = env["OPENAI_API_KEY"]

    merged = _normalize(from_env)
    merged.update(_normalize(overrides or {}))
    return dataclasses.replace(defaults, **merged)
