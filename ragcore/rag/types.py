"""Common data structures for the RAG pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ragcore.core.exceptions import ValidationError


class EmbeddingStatus(str, Enum):
    """Per-document embedding lifecycle. Only the orchestrator moves documents between states."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    # Set by the document CRUD layer when content changes after embedding
    OUTDATED = "outdated"


# Statuses picked up by a knowledge-base batch run
RESUMABLE_STATUSES: Tuple[EmbeddingStatus, ...] = (
    EmbeddingStatus.PENDING,
    EmbeddingStatus.OUTDATED,
    EmbeddingStatus.FAILED,
)


@dataclass
class Document:
    id: str
    kb_id: str
    title: str
    content: str
    content_hash: str = ""
    embedding_status: EmbeddingStatus = EmbeddingStatus.PENDING
    source_url: Optional[str] = None


@dataclass(frozen=True)
class ChunkPiece:
    """Chunker output: one trimmed slice of the source text."""

    content: str
    token_count: int
    content_hash: str
    # Offsets into the trimmed source; content == source[start:end]
    start: int = 0
    end: int = 0


@dataclass
class ChunkRecord:
    """A chunk as persisted by a ChunkStore, vector included."""

    id: str
    document_id: str
    kb_id: str
    chunk_index: int
    content: str
    content_hash: str
    token_count: int
    embedding: List[float]
    lexical_tokens: List[str] = field(default_factory=list)


@dataclass
class ScoredChunk:
    """A single store-level hit (vector similarity or lexical score)."""

    chunk_id: str
    document_id: str
    kb_id: str
    chunk_index: int
    content: str
    score: float
    token_count: int = 0
    document_title: Optional[str] = None
    source_url: Optional[str] = None


class SearchType(str, Enum):
    VECTOR = "vector"
    LEXICAL = "lexical"
    HYBRID = "hybrid"


class ScopeKind(str, Enum):
    KNOWLEDGE_BASE = "knowledge_base"
    DOCUMENT = "document"
    KNOWLEDGE_BASES = "knowledge_bases"


@dataclass(frozen=True)
class SearchScope:
    """Where a search runs: one knowledge base, one document, or several knowledge bases."""

    kind: ScopeKind
    ids: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.ids or any(not i for i in self.ids):
            raise ValidationError("Search scope needs at least one non-empty id", details={"kind": self.kind.value})
        if self.kind is not ScopeKind.KNOWLEDGE_BASES and len(self.ids) != 1:
            raise ValidationError(f"{self.kind.value} scope takes exactly one id")

    @classmethod
    def knowledge_base(cls, kb_id: str) -> "SearchScope":
        return cls(ScopeKind.KNOWLEDGE_BASE, (kb_id,))

    @classmethod
    def document(cls, document_id: str) -> "SearchScope":
        return cls(ScopeKind.DOCUMENT, (document_id,))

    @classmethod
    def knowledge_bases(cls, kb_ids: List[str]) -> "SearchScope":
        # Duplicates would double-count nothing but still read oddly in filters
        return cls(ScopeKind.KNOWLEDGE_BASES, tuple(dict.fromkeys(kb_ids)))

    @property
    def id(self) -> str:
        return self.ids[0]


MAX_MATCH_COUNT = 100
MAX_CANDIDATE_COUNT = 200


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class SearchOptions:
    """
    Retrieval parameters for one hybrid search.

    The constructor rejects out-of-range values; caller-facing layers use
    ``SearchOptions.clamped`` to bring user input into range first.
    """

    match_count: int = 5
    match_threshold: float = 0.5
    vector_weight: float = 0.5
    rrf_k: int = 60
    candidate_count: int = 20

    def __post_init__(self) -> None:
        errors: Dict[str, object] = {}
        if not 1 <= self.match_count <= MAX_MATCH_COUNT:
            errors["match_count"] = self.match_count
        if not 1 <= self.candidate_count <= MAX_CANDIDATE_COUNT:
            errors["candidate_count"] = self.candidate_count
        if not 0.0 <= self.vector_weight <= 1.0:
            errors["vector_weight"] = self.vector_weight
        if not 0.0 <= self.match_threshold <= 1.0:
            errors["match_threshold"] = self.match_threshold
        if self.rrf_k < 1:
            errors["rrf_k"] = self.rrf_k
        if errors:
            raise ValidationError("Invalid search options", details=errors)

    @classmethod
    def clamped(
        cls,
        *,
        match_count: Optional[int] = None,
        match_threshold: Optional[float] = None,
        vector_weight: Optional[float] = None,
        rrf_k: Optional[int] = None,
        candidate_count: Optional[int] = None,
        max_match_count: int = MAX_MATCH_COUNT,
    ) -> "SearchOptions":
        defaults = cls()
        count = defaults.match_count if match_count is None else int(_clamp(match_count, 1, max_match_count))
        candidates = defaults.candidate_count if candidate_count is None else candidate_count
        return cls(
            match_count=count,
            match_threshold=(
                defaults.match_threshold if match_threshold is None else _clamp(match_threshold, 0.0, 1.0)
            ),
            vector_weight=defaults.vector_weight if vector_weight is None else _clamp(vector_weight, 0.0, 1.0),
            rrf_k=defaults.rrf_k if rrf_k is None else max(1, rrf_k),
            # Each leg must be able to return at least match_count rows
            candidate_count=int(_clamp(max(candidates, count), 1, MAX_CANDIDATE_COUNT)),
        )


@dataclass
class RankedChunk:
    """One fused hybrid-search result with provenance of both legs."""

    chunk_id: str
    document_id: str
    chunk_index: int
    content: str
    similarity: float
    combined_score: float
    search_type: SearchType
    token_count: int = 0
    vector_rank: Optional[int] = None
    lexical_rank: Optional[int] = None
    document_title: Optional[str] = None
    source_url: Optional[str] = None
    kb_id: Optional[str] = None


@dataclass
class RerankResult:
    chunk: RankedChunk
    relevance_score: float
    # 0-based positions in the candidate list and in the reranked output
    original_rank: int
    new_rank: int


@dataclass
class DocumentGroup:
    """Display grouping of ranked chunks belonging to one document."""

    document_id: str
    document_title: Optional[str]
    source_url: Optional[str]
    max_similarity: float
    chunks: List[RankedChunk] = field(default_factory=list)


@dataclass
class EmbedDocumentResult:
    document_id: str
    chunk_count: int
    status: EmbeddingStatus = EmbeddingStatus.COMPLETED


@dataclass
class BatchEmbedResult:
    """Summary of a knowledge-base embedding run."""

    kb_id: str
    total: int
    processed: int = 0
    failed: int = 0
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.failed == 0


@dataclass
class EmbeddingStats:
    total_documents: int = 0
    embedded_documents: int = 0
    pending_documents: int = 0
    processing_documents: int = 0
    failed_documents: int = 0
    outdated_documents: int = 0
    total_chunks: int = 0
