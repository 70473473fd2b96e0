"""Separator-aware splitter: token-bounded chunks cut at the latest separator, with overlap."""
from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from itertools import accumulate
from typing import List, Sequence

from ragcore.core.exceptions import ValidationError
from ragcore.rag.types import ChunkPiece

from .base import UNITS_PER_TOKEN, BaseSplitter, char_units

logger = logging.getLogger(__name__)

DEFAULT_SEPARATORS: Sequence[str] = ("\n\n", "\n", ". ", "。", " ")

# Lookahead and overlap windows are sized in characters per token
CHARS_PER_TOKEN = 4


class SeparatorSplitter(BaseSplitter):
    """
    Splits text into chunks of at most ``chunk_size`` estimated tokens.

    Each step looks ahead ``chunk_size * 4`` characters and cuts at the latest
    separator whose chunk still fits the budget. Without one, the chunk is
    hard cut at the longest prefix that fits (at least one character). A
    remainder that fits entirely is taken whole. After each chunk the next one
    is seeded with the trailing ``chunk_overlap`` tokens of the previous one;
    a seed followed only by whitespace is dropped, so no chunk repeats its
    predecessor.
    """

    def __init__(
        self,
        chunk_size: int = 512,
        chunk_overlap: int = 100,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
    ) -> None:
        if chunk_size < 1:
            raise ValidationError("chunk_size must be >= 1", details={"chunk_size": chunk_size})
        if chunk_overlap < 0:
            raise ValidationError("chunk_overlap must be >= 0", details={"chunk_overlap": chunk_overlap})
        if chunk_overlap >= chunk_size:
            raise ValidationError(
                "chunk_overlap must be smaller than chunk_size",
                details={"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = tuple(s for s in separators if s)

    def split(self, text: str) -> List[ChunkPiece]:
        source = (text or "").strip()
        if not source:
            return []

        n = len(source)
        # prefix[i] = estimator units of source[:i]
        prefix = [0, *accumulate(char_units(ch) for ch in source)]
        budget = self.chunk_size * UNITS_PER_TOKEN
        lookahead = self.chunk_size * CHARS_PER_TOKEN

        pieces: List[ChunkPiece] = []
        pos = 0
        cur_start = 0
        # source[cur_start:seed_end] is overlap carried over from the previous chunk
        seed_end = 0

        def emit() -> None:
            nonlocal cur_start, seed_end
            if not source[seed_end:pos].strip():
                # Only overlap and whitespace since the last chunk: drop the seed, emit nothing
                cur_start = seed_end = pos
                return
            piece = self._piece(source, cur_start, pos)
            if piece is not None:
                pieces.append(piece)
            cur_start = self._seed(prefix, cur_start, pos, n)
            seed_end = pos

        while pos < n:
            window_end = min(pos + lookahead, n)
            # Longest prefix of the window keeping the buffer within budget
            fit_end = bisect_right(prefix, prefix[cur_start] + budget, pos, window_end + 1) - 1

            hard = False
            if fit_end >= n:
                cut = n
            else:
                cut = self._latest_separator(source, pos, fit_end)
            if cut is None:
                if fit_end <= pos and cur_start < pos:
                    emit()
                    continue
                cut, hard = max(fit_end, pos + 1), True

            pos = cut
            tokens = -(-(prefix[pos] - prefix[cur_start]) // UNITS_PER_TOKEN)
            if pos >= n or hard or tokens >= self.chunk_size:
                emit()

        logger.debug("Split %d characters into %d chunks", n, len(pieces))
        return pieces

    def _latest_separator(self, source: str, pos: int, fit_end: int) -> int | None:
        """End offset of the latest separator in source[pos+1:fit_end]; earlier separators win ties."""
        best: int | None = None
        for sep in self.separators:
            idx = source.rfind(sep, pos + 1, fit_end)
            if idx == -1:
                continue
            end = idx + len(sep)
            if best is None or end > best:
                best = end
        return best

    def _seed(self, prefix: List[int], start: int, end: int, n: int) -> int:
        """Start offset of the overlap seed taken from source[start:end]; end when there is none."""
        if self.chunk_overlap <= 0 or end >= n:
            return end
        seed_start = max(start, end - self.chunk_overlap * CHARS_PER_TOKEN)
        limit = prefix[end] - self.chunk_overlap * UNITS_PER_TOKEN
        return max(seed_start, bisect_left(prefix, limit, seed_start, end + 1))


def chunk_document(content: str, chunk_size: int = 512, chunk_overlap: int = 100) -> List[ChunkPiece]:
    """Function form of SeparatorSplitter(chunk_size, chunk_overlap).split(content)."""
    return SeparatorSplitter(chunk_size, chunk_overlap).split(content)
