# src/pedsage/stores/chroma.py
"""ChromaDB vector index implementation.

Requires the chromadb package: pip install pedsage[chroma]
"""

from pathlib import Path

import chromadb

from pedsage.models import CorpusEntry
from pedsage.stores.base import VectorIndex


class ChromaVectorIndex(VectorIndex):
    """ChromaDB-based vector index over corpus entry embeddings."""

    def __init__(self, persist_dir: str, collection_name: str = "pedsage") -> None:
        """Initialize the ChromaDB index."""
        Path(persist_dir).mkdir(parents=True, exist_ok=True)
        self._client = chromadb.PersistentClient(path=persist_dir)
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    def close(self) -> None:
        """Close the index and release resources.

        ChromaDB has no official close(); stopping the internal system releases
        its file handles. See: https://github.com/chroma-core/chroma/issues/5868
        """
        self._collection = None  # type: ignore[assignment]
        system = getattr(self._client, "_system", None)
        if system is not None:
            system.stop()
        self._client = None  # type: ignore[assignment]

    def add(self, entries: list[CorpusEntry]) -> None:
        """Index embedded entries, replacing existing vectors for the same ids."""
        embedded = [e for e in entries if e.embedding is not None]
        if not embedded:
            return

        self._collection.upsert(
            ids=[e.id for e in embedded],
            embeddings=[e.embedding for e in embedded],  # type: ignore[misc]
            metadatas=[{"entry_id": e.id, "kind": e.kind} for e in embedded],
        )

    def similarities(self, embedding: list[float], entry_ids: list[str]) -> dict[str, float]:
        """Cosine similarity between the query embedding and each indexed id."""
        if not entry_ids or self._collection.count() == 0:
            return {}

        results = self._collection.query(
            query_embeddings=[embedding],  # type: ignore[arg-type]
            n_results=min(len(entry_ids), self._collection.count()),
            where={"entry_id": {"$in": entry_ids}},  # type: ignore[dict-item]
            include=["distances"],
        )

        ids = results["ids"][0]
        distances = results["distances"][0]  # type: ignore[index]
        # Cosine distance = 1 - cosine similarity
        return {eid: 1.0 - dist for eid, dist in zip(ids, distances, strict=True)}

    def delete(self, entry_ids: list[str]) -> None:
        """Remove entries from the index."""
        if not entry_ids:
            return
        self._collection.delete(ids=entry_ids)

    def count(self) -> int:
        """Number of indexed vectors."""
        return self._collection.count()
