"""Format ranked chunks into the evidence block handed to a language model."""
from __future__ import annotations

from typing import Sequence

from ragcore.rag.types import RankedChunk

FRAGMENT_SEPARATOR = "\n\n---\n\n"


def format_chunk_context(chunks: Sequence[RankedChunk], *, label: str = "Fragment") -> str:
    """
    Render chunks as numbered blocks::

        [Fragment 1] (Similarity: 87.5%)
        <content>

    Blocks are joined by a horizontal rule. Empty input gives an empty string.
    """
    return FRAGMENT_SEPARATOR.join(
        f"[{label} {i}] (Similarity: {chunk.similarity * 100:.1f}%)\n{chunk.content}"
        for i, chunk in enumerate(chunks, start=1)
    )
