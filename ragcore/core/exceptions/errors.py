"""
Concrete error kinds raised by the RAG core.
"""
from __future__ import annotations

from typing import Any, Optional

from ragcore.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Missing credential or malformed configuration. Never retried."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Input contract violated (empty query, out-of-range weight, ...)."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Requested document or knowledge base does not exist."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ProviderError(ProjectError):
    """Upstream embedding or reranking service rejected or failed a request."""

    default_code = "PROVIDER_ERROR"
    default_http_status = 502

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        merged = dict(details or {})
        if provider is not None:
            merged.setdefault("provider", provider)
        if status_code is not None:
            merged.setdefault("status_code", status_code)
        super().__init__(message, details=merged, cause=cause)
        self.provider = provider
        self.status_code = status_code


class PersistenceError(ProjectError):
    """Chunk or document store operation failed."""

    default_code = "PERSISTENCE_ERROR"
    default_http_status = 503
