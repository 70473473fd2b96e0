"""Embedding client interface: list of texts -> list of vectors, order preserved."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence


class BaseEmbeddingClient(ABC):
    """Minimal embedding interface shared by every provider backend."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Provider name (e.g. openai, aliyun)."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Concrete model id (e.g. text-embedding-3-small)."""
        ...

    @abstractmethod
    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed one request's worth of texts. Returns one vector per input, in input order.

        Backends do not batch; the caller splits input by batch size.
        Upstream rejections are raised as ProviderError.
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections. Default: nothing to release."""
        return None
