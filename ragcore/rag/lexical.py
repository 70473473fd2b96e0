"""
Lexical index helpers: mixed Latin/CJK tokenizer and Okapi BM25 scoring.

Chunks store the output of ``tokenize`` at insert time; stores score a query
against those token lists with ``BM25Scorer``.
"""
from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

_CJK_CHARS = "\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff"
_TOKEN_RE = re.compile(f"([{_CJK_CHARS}]+)|([^\\W_{_CJK_CHARS}]+)")

STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "in",
        "is", "it", "its", "of", "on", "or", "that", "the", "this", "to", "was",
        "were", "will", "with",
    }
)


def tokenize(text: str) -> List[str]:
    """
    Split text into lexical tokens.

    Latin/numeric words are lower-cased with stop words removed. CJK runs have
    no word boundaries, so they become overlapping bigrams (a lone ideograph
    stays a single token).
    """
    tokens: List[str] = []
    for cjk, word in _TOKEN_RE.findall(text or ""):
        if cjk:
            if len(cjk) == 1:
                tokens.append(cjk)
            else:
                tokens.extend(cjk[i : i + 2] for i in range(len(cjk) - 1))
            continue
        lowered = word.lower()
        if lowered not in STOP_WORDS:
            tokens.append(lowered)
    return tokens


def unique_terms(tokens: Iterable[str]) -> List[str]:
    """Distinct terms in first-seen order."""
    return list(dict.fromkeys(tokens))


@dataclass(frozen=True)
class BM25Scorer:
    """Okapi BM25 with the usual defaults; idf uses the non-negative Lucene variant."""

    k1: float = 1.2
    b: float = 0.75

    def score_corpus(
        self,
        query_tokens: Sequence[str],
        documents: Sequence[Sequence[str]],
        *,
        total_documents: int | None = None,
        document_frequencies: Dict[str, int] | None = None,
        average_length: float | None = None,
    ) -> List[Tuple[int, float]]:
        """
        Score each document against the query.

        Corpus statistics default to those of ``documents``; stores that only
        scan a prefiltered subset pass the collection-wide values instead.
        Returns ``(position, score)`` for documents with a positive score,
        best first, ties in input order.
        """
        terms = unique_terms(query_tokens)
        if not terms or not documents:
            return []

        n_docs = total_documents if total_documents is not None else len(documents)
        if document_frequencies is None:
            document_frequencies = Counter()
            for doc in documents:
                document_frequencies.update(set(doc) & set(terms))
        if average_length is None:
            average_length = sum(len(d) for d in documents) / len(documents)
        average_length = average_length or 1.0

        idf = {
            t: math.log(1 + (n_docs - document_frequencies.get(t, 0) + 0.5) / (document_frequencies.get(t, 0) + 0.5))
            for t in terms
        }

        scored: List[Tuple[int, float]] = []
        for position, doc in enumerate(documents):
            counts = Counter(doc)
            norm = self.k1 * (1 - self.b + self.b * len(doc) / average_length)
            score = 0.0
            for t in terms:
                tf = counts.get(t, 0)
                if tf:
                    score += idf[t] * tf * (self.k1 + 1) / (tf + norm)
            if score > 0:
                scored.append((position, score))
        scored.sort(key=lambda item: (-item[1], item[0]))
        return scored
