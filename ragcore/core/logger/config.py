"""
Logger configuration, built in code or from the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class LoggerConfig:
    """
    Settings for the ``ragcore`` logger tree.

    Use LoggerConfig.from_env() for env-based config, or build explicitly.
    """

    level: str = "INFO"
    # Directory for the rotating JSON file; None disables the file handler
    log_dir: Optional[str] = None
    log_file_basename: str = "ragcore"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    root_name: str = "ragcore"
    console: bool = True
    file_rotating: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LoggerConfig":
        """Build config from LOG_* environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            level=env.get("LOG_LEVEL", "INFO").upper(),
            log_dir=env.get("LOG_DIR") or None,
            log_file_basename=env.get("LOG_FILE_BASENAME", "ragcore"),
            max_bytes=int(env.get("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            backup_count=int(env.get("LOG_BACKUP_COUNT", "5")),
            root_name=env.get("LOG_ROOT_NAME", "ragcore"),
            console=env.get("LOG_CONSOLE", "true").lower() in _TRUTHY,
            file_rotating=env.get("LOG_FILE_ROTATING", "true").lower() in _TRUTHY,
        )
