"""
ragcore exception system.

Usage:
    from ragcore.core.exceptions import ProviderError, ValidationError

    raise ValidationError("query must not be empty", details={"field": "query"})
    raise ProviderError("rerank failed", provider="cohere", status_code=429)
"""
from ragcore.core.exceptions.base import ProjectError
from ragcore.core.exceptions.errors import (
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ProviderError",
    "PersistenceError",
]
