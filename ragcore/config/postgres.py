"""
ragcore.config.postgres – connection settings for the SQL document store.

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT,
DB_POOL_RECYCLE, DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ragcore.core.exceptions import ConfigurationError

_SCHEMES = ("postgresql://", "postgres://", "postgresql+asyncpg://")


def _positive(value: int, name: str, min_val: int = 1) -> None:
    if not isinstance(value, int) or value < min_val:
        raise ConfigurationError(f"{name} must be an integer >= {min_val}, got {value!r}")


@dataclass(frozen=True)
class PostgresConfig:
    """PostgreSQL connection and pool configuration, validated on construction."""

    url: str
    """DSN; converted to postgresql+asyncpg in the engine."""

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800
    """Seconds after which a pooled connection is recycled."""

    echo: bool = False
    application_name: str = "ragcore"

    def __post_init__(self) -> None:
        url = (self.url or "").strip()
        if not url.startswith(_SCHEMES):
            raise ConfigurationError(
                "DATABASE_URL must start with postgresql://, postgres:// or postgresql+asyncpg://",
                details={"url": url},
            )
        _positive(self.pool_size, "pool_size")
        _positive(self.max_overflow, "max_overflow", min_val=0)
        _positive(self.pool_timeout, "pool_timeout")
        _positive(self.pool_recycle, "pool_recycle")
        if not self.application_name.strip():
            raise ConfigurationError("application_name must be a non-empty string")

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: object
    ) -> "PostgresConfig":
        """Build from environment; keyword overrides take precedence."""
        env = os.environ if environ is None else environ

        def _int(attr: str, var: str, default: int) -> int:
            value = overrides.get(attr)
            return int(value if value is not None else env.get(var, default))  # type: ignore[arg-type]

        echo = overrides.get("echo")
        if echo is None:
            echo = env.get("DB_ECHO", "").strip().lower() in ("1", "true", "yes")
        return cls(
            url=str(overrides.get("url") or env.get("DATABASE_URL", "postgresql://localhost/ragcore")).strip(),
            pool_size=_int("pool_size", "DB_POOL_SIZE", 10),
            max_overflow=_int("max_overflow", "DB_MAX_OVERFLOW", 20),
            pool_timeout=_int("pool_timeout", "DB_POOL_TIMEOUT", 30),
            pool_recycle=_int("pool_recycle", "DB_POOL_RECYCLE", 1800),
            echo=bool(echo),
            application_name=str(overrides.get("application_name") or env.get("DB_APPLICATION_NAME", "ragcore")),
        )


def load_postgres_config(**overrides: object) -> PostgresConfig:
    return PostgresConfig.from_env(**overrides)
