"""Reranker configuration: which relevance API reorders fused candidates."""
from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ragcore.config.secrets import is_credential, mask_api_key
from ragcore.core.exceptions import ConfigurationError


class RerankerProvider(str, Enum):
    COHERE = "cohere"
    JINA = "jina"
    VOYAGE = "voyage"
    # No remote call: candidates keep their fused score
    LOCAL_BGE = "local-bge"


@dataclass(frozen=True)
class RerankerConfig:
    provider: RerankerProvider = RerankerProvider.LOCAL_BGE
    api_key: str = ""
    model: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = 30.0

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "provider", RerankerProvider(self.provider))
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown reranker provider: {self.provider!r}",
                details={"supported": [p.value for p in RerankerProvider]},
            ) from exc
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout!r}")

    @property
    def has_credential(self) -> bool:
        return is_credential(self.api_key)

    def to_dict(self, *, mask: bool = True) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["provider"] = self.provider.value
        if mask:
            data["api_key"] = mask_api_key(self.api_key)
        return data


_ALIASES = {"apiKey": "api_key", "baseUrl": "base_url"}
_FIELDS = {f.name for f in dataclasses.fields(RerankerConfig)}
_ENV_VARS = {
    "provider": "RERANKER_PROVIDER",
    "api_key": "RERANKER_API_KEY",
    "model": "RERANKER_MODEL",
    "base_url": "RERANKER_BASE_URL",
    "timeout": "RERANKER_TIMEOUT",
}


def _normalize(values: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in values.items():
        name = _ALIASES.get(key, key)
        if name not in _FIELDS or value is None:
            continue
        if name == "api_key" and not is_credential(value):
            continue
        if name == "timeout":
            try:
                value = float(value)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid reranker timeout: {value!r}", cause=exc) from exc
        out[name] = value
    return out


def load_reranker_config(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> RerankerConfig:
    """Resolve the reranker config: defaults <- RERANKER_* environment <- persisted overrides."""
    env = os.environ if environ is None else environ
    from_env = {name: env[var].strip() for name, var in _ENV_VARS.items() if env.get(var, "").strip()}
    merged = _normalize(from_env)
    merged.update(_normalize(overrides or {}))
    return RerankerConfig(**merged)
