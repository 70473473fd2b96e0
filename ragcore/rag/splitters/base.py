"""Splitter interface: text -> list of ChunkPiece, plus the shared token/hash helpers."""
from __future__ import annotations

import math
import re
import struct
from abc import ABC, abstractmethod
from typing import List

from ragcore.rag.types import ChunkPiece

# CJK unified ideographs counted as "wide" by the token estimator
_WIDE_RE = re.compile("[\u4e00-\u9fa5]")

# Estimator weights expressed in quarter tokens
WIDE_UNITS = 6
NARROW_UNITS = 1
UNITS_PER_TOKEN = 4


def char_units(ch: str) -> int:
    return WIDE_UNITS if "\u4e00" <= ch <= "\u9fa5" else NARROW_UNITS


def estimate_tokens(text: str) -> int:
    """
    Cheap token estimate: 1.5 per CJK ideograph, 0.25 per other character, rounded up.

    Deliberately not a real tokenizer; exact counts are provider specific.
    """
    if not text:
        return 0
    wide = len(_WIDE_RE.findall(text))
    narrow = len(text) - wide
    return math.ceil((wide * WIDE_UNITS + narrow * NARROW_UNITS) / UNITS_PER_TOKEN)


def content_hash(text: str) -> str:
    """
    32-bit polynomial string hash (h = h * 31 + unit) over UTF-16 code units.

    Rendered as the absolute value of the signed result in lowercase hex,
    zero padded to 8 digits. Hashes already stored for existing chunks were
    produced by this exact function; changing it invalidates change detection.
    """
    h = 0
    for (unit,) in struct.iter_unpack("<H", text.encode("utf-16-le")):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return format(abs(h), "08x")


class BaseSplitter(ABC):
    """Every splitter produces the same output: list[ChunkPiece] in source order."""

    @abstractmethod
    def split(self, text: str) -> List[ChunkPiece]:
        """
        Split text into chunk pieces.

        Args:
            text: Source text. Leading/trailing whitespace is ignored.

        Returns:
            Pieces with content, estimated token count, content hash and offsets
            into the trimmed text. Empty or whitespace-only input returns [].
        """
        ...

    @staticmethod
    def _piece(source: str, start: int, end: int) -> ChunkPiece | None:
        """Trim source[start:end] and wrap it as a ChunkPiece; None when only whitespace remains."""
        raw = source[start:end]
        stripped = raw.strip()
        if not stripped:
            return None
        lead = len(raw) - len(raw.lstrip())
        return ChunkPiece(
            content=stripped,
            token_count=estimate_tokens(stripped),
            content_hash=content_hash(stripped),
            start=start + lead,
            end=start + lead + len(stripped),
        )
