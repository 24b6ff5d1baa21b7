# src/pedsage/ranker.py
"""Relevance ranking of candidate corpus entries."""

import logging
import math
from dataclasses import dataclass

import numpy as np

from pedsage.embedder import Embedder
from pedsage.exceptions import EmbeddingDimensionError
from pedsage.matcher import extract_terms
from pedsage.models import CorpusEntry, SearchResult
from pedsage.stores import VectorIndex

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity in [-1, 1]. Zero vectors have no direction and score 0."""
    if len(a) != len(b):
        raise EmbeddingDimensionError(
            f"Embedding dimensions differ: query has {len(a)}, entry has {len(b)}"
        )
    a_arr, b_arr = np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)
    norm_a, norm_b = np.linalg.norm(a_arr), np.linalg.norm(b_arr)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a_arr, b_arr) / (norm_a * norm_b))


def angular_score(cosine: float) -> float:
    """Map a cosine similarity onto [0, 1], preserving order."""
    return min(1.0, max(0.0, (cosine + 1.0) / 2.0))


def lexical_score(terms: list[str], entry: CorpusEntry, threshold: float) -> float:
    """Score an entry by the fraction of query terms it contains.

    Any entry containing at least one term lands in [threshold, 1], so a
    lexical candidate always survives the threshold it was scored against.
    Entries containing no term score 0.
    """
    if not terms:
        return 0.0
    text = entry.searchable_text
    found = sum(1 for term in terms if term in text)
    if found == 0:
        return 0.0
    return min(1.0, threshold + (1.0 - threshold) * (found / len(terms)))


@dataclass(frozen=True)
class KindQuota:
    """Split of the result budget between textbook chunks and resources.

    With ``limit`` results, chunks get ``ceil(limit * chunk_share)`` slots and
    resources get the rest. A kind that cannot fill its slots hands them to the
    best remaining entries of the other kind. The split only applies when both
    kinds pass the threshold.

    The default 0.6 share gives 3 chunks + 2 resources at limit 5.
    """

    chunk_share: float = 0.6

    def __post_init__(self) -> None:
        if not 0.0 <= self.chunk_share <= 1.0:
            raise ValueError("chunk_share must be between 0.0 and 1.0")

    def slots(self, limit: int) -> tuple[int, int]:
        """Return (chunk_slots, resource_slots) for a result limit."""
        chunk_slots = min(limit, math.ceil(limit * self.chunk_share))
        return chunk_slots, limit - chunk_slots

    def select(
        self, ranked: list[tuple[CorpusEntry, float]], limit: int
    ) -> list[tuple[CorpusEntry, float]]:
        """Pick up to ``limit`` of the ranked pairs, honouring the split."""
        chunks = [pair for pair in ranked if pair[0].kind == "chunk"]
        resources = [pair for pair in ranked if pair[0].kind == "resource"]
        if not chunks or not resources:
            return ranked[:limit]

        chunk_slots, resource_slots = self.slots(limit)
        picked = chunks[:chunk_slots] + resources[:resource_slots]
        picked_ids = {entry.id for entry, _ in picked}
        backfill = [pair for pair in ranked if pair[0].id not in picked_ids]
        picked.extend(backfill[: limit - len(picked)])
        picked.sort(key=_rank_key)
        return picked


def _rank_key(pair: tuple[CorpusEntry, float]) -> tuple[float, str]:
    entry, score = pair
    return (-score, entry.id)


class RelevanceRanker:
    """Scores and orders candidate entries against a query.

    Scoring is embedding-based when an embedder is configured and the entry has
    an embedding (or the vector index knows it), and lexical otherwise. Both
    paths are deterministic. Results are ordered by score descending, then
    entry id ascending.
    """

    def __init__(
        self,
        embedder: Embedder | None = None,
        vector_index: VectorIndex | None = None,
        threshold: float = 0.5,
        limit: int = 10,
        quota: KindQuota | None = None,
    ) -> None:
        """Initialize the ranker.

        Args:
            embedder: Embeds the query for vector scoring. None = lexical only.
            vector_index: Optional index supplying cosine similarities instead of
                          the embeddings stored on the entries.
            threshold: Default minimum similarity score
            limit: Default maximum number of results
            quota: Per-kind result split (default: KindQuota())
        """
        _check_bounds(threshold, limit)
        self.embedder = embedder
        self.vector_index = vector_index
        self.threshold = threshold
        self.limit = limit
        self.quota = quota if quota is not None else KindQuota()

    def score(self, query: str, candidates: list[CorpusEntry], threshold: float) -> list[float]:
        """Similarity score in [0, 1] for each candidate, in input order."""
        if not candidates:
            return []

        cosines = self._cosines(query, candidates)
        terms = extract_terms(query)
        scores = []
        for entry in candidates:
            cosine = cosines.get(entry.id)
            if cosine is not None:
                scores.append(angular_score(cosine))
            else:
                scores.append(lexical_score(terms, entry, threshold))
        return scores

    def _cosines(self, query: str, candidates: list[CorpusEntry]) -> dict[str, float]:
        if self.embedder is None:
            return {}
        if self.vector_index is None and all(c.embedding is None for c in candidates):
            return {}

        query_embedding = self.embedder.embed_text(query)
        if self.vector_index is not None:
            return self.vector_index.similarities(query_embedding, [c.id for c in candidates])
        return {
            c.id: cosine_similarity(query_embedding, c.embedding)
            for c in candidates
            if c.embedding is not None
        }

    def rank(
        self,
        query: str,
        candidates: list[CorpusEntry],
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """Score, filter, order and truncate candidates.

        Args:
            query: The user's query
            candidates: Unordered candidate entries
            threshold: Minimum score to keep (default: self.threshold)
            limit: Maximum results (default: self.limit)

        Returns:
            At most ``limit`` SearchResults, every score >= threshold
        """
        threshold = self.threshold if threshold is None else threshold
        limit = self.limit if limit is None else limit
        _check_bounds(threshold, limit)

        unique: dict[str, CorpusEntry] = {}
        for entry in candidates:
            unique.setdefault(entry.id, entry)
        if not unique:
            return []

        entries = list(unique.values())
        scores = self.score(query, entries, threshold)
        ranked = [
            (entry, score)
            for entry, score in zip(entries, scores, strict=True)
            if score >= threshold
        ]
        ranked.sort(key=_rank_key)
        selected = self.quota.select(ranked, limit)

        logger.debug(
            "Ranked %d candidates: %d passed threshold %.2f, %d kept",
            len(unique),
            len(ranked),
            threshold,
            len(selected),
        )
        return [SearchResult(entry=entry, similarity_score=score) for entry, score in selected]


def _check_bounds(threshold: float, limit: int) -> None:
    if not 0.0 <= threshold <= 1.0:
        raise ValueError("threshold must be between 0.0 and 1.0")
    if limit <= 0:
        raise ValueError("limit must be positive")
