"""
ragcore.config.qdrant – Qdrant connection and chunk collection config.

Env vars: QDRANT_URL, QDRANT_API_KEY, QDRANT_TIMEOUT, QDRANT_VECTOR_SIZE,
QDRANT_COLLECTION_NAME, QDRANT_DISTANCE, QDRANT_LEXICAL_SCAN_LIMIT.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ragcore.core.exceptions import ConfigurationError

_VALID_DISTANCES = frozenset({"Cosine", "Dot", "Euclid"})


@dataclass(frozen=True)
class QdrantConfig:
    url: str
    api_key: Optional[str] = None
    timeout: int = 30
    vector_size: int = 1536
    collection_name: str = "document_chunks"
    distance: str = "Cosine"
    # Upper bound on chunks pulled per lexical query before BM25 scoring
    lexical_scan_limit: int = 1000

    def __post_init__(self) -> None:
        url = (self.url or "").strip()
        if not url.startswith(("http://", "https://")):
            raise ConfigurationError("QDRANT_URL must start with http:// or https://", details={"url": url})
        for name in ("timeout", "vector_size", "lexical_scan_limit"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if self.distance not in _VALID_DISTANCES:
            raise ConfigurationError(f"distance must be one of {sorted(_VALID_DISTANCES)}, got {self.distance!r}")
        if not self.collection_name.strip():
            raise ConfigurationError("collection_name must be a non-empty string")

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: object
    ) -> "QdrantConfig":
        env = os.environ if environ is None else environ
        raw_key = overrides.get("api_key") or env.get("QDRANT_API_KEY")
        api_key = str(raw_key).strip() if raw_key else None
        return cls(
            url=str(overrides.get("url") or env.get("QDRANT_URL", "http://localhost:6333")).strip().rstrip("/"),
            api_key=api_key or None,
            timeout=int(overrides.get("timeout") or env.get("QDRANT_TIMEOUT", "30")),  # type: ignore[arg-type]
            vector_size=int(overrides.get("vector_size") or env.get("QDRANT_VECTOR_SIZE", "1536")),  # type: ignore[arg-type]
            collection_name=str(overrides.get("collection_name") or env.get("QDRANT_COLLECTION_NAME", "document_chunks")).strip(),
            distance=str(overrides.get("distance") or env.get("QDRANT_DISTANCE", "Cosine")).strip(),
            lexical_scan_limit=int(overrides.get("lexical_scan_limit") or env.get("QDRANT_LEXICAL_SCAN_LIMIT", "1000")),  # type: ignore[arg-type]
        )


def load_qdrant_config(**overrides: object) -> QdrantConfig:
    return QdrantConfig.from_env(**overrides)
