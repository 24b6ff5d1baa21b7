# src/pedsage/ingestor.py
"""Ingestion pipeline for corpus entries."""

import logging
from collections import Counter
from collections.abc import Callable

from pedsage.embedder import Embedder
from pedsage.exceptions import DuplicateEntryError, EmbeddingDimensionError
from pedsage.models import CorpusEntry
from pedsage.stores import CorpusStore, VectorIndex

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int, str], None]
"""Callback for ingestion progress updates.

Args:
    event: Event type: "validating", "embedding", "storing", or "indexing"
    current: Current progress count (0 to total)
    total: Total items to process
    message: Human-readable status message
"""


class Ingestor:
    """Validates, embeds and stores corpus entries.

    Pipeline:
    1. Check ids are unique within the batch and not taken by the other kind
    2. Embed entries (optional)
    3. Check the corpus keeps one embedding dimension, and either every entry
       has an embedding or none does
    4. Store entries in the CorpusStore
    5. Add embedded entries to the VectorIndex (optional)

    Re-ingesting an id of the same kind replaces the stored entry.
    """

    def __init__(
        self,
        corpus_store: CorpusStore,
        embedder: Embedder | None = None,
        vector_index: VectorIndex | None = None,
    ) -> None:
        """Initialize the ingestor.

        Args:
            corpus_store: Store for corpus entries
            embedder: Component to embed entries. None = store entries as given.
            vector_index: Optional index that receives embedded entries
        """
        self.corpus_store = corpus_store
        self.embedder = embedder
        self.vector_index = vector_index

    def _check_ids(self, entries: list[CorpusEntry]) -> None:
        seen: dict[str, str] = {}
        for entry in entries:
            if entry.id in seen:
                raise DuplicateEntryError(f"Entry id {entry.id} appears twice in the batch")
            seen[entry.id] = entry.kind

        for stored in self.corpus_store.get_many(list(seen)):
            if stored.kind != seen[stored.id]:
                raise DuplicateEntryError(
                    f"Entry id {stored.id} is already used by a {stored.kind}"
                )

    def _check_embeddings(self, entries: list[CorpusEntry]) -> None:
        embedded = [e for e in entries if e.embedding is not None]
        if len(embedded) not in (0, len(entries)):
            raise EmbeddingDimensionError(
                f"{len(entries) - len(embedded)} of {len(entries)} entries have no embedding"
            )
        dims = {len(e.embedding) for e in embedded}
        if len(dims) > 1:
            raise EmbeddingDimensionError(f"Batch mixes embedding dimensions {sorted(dims)}")

        # Entries the batch replaces do not count against it
        replaced = self.corpus_store.get_many([e.id for e in entries])
        total = sum(self.corpus_store.count_by_kind().values())
        unembedded = self.corpus_store.count_without_embedding()
        if embedded:
            store_dims = self.corpus_store.embedding_dimensions()
            if store_dims - dims:
                raise EmbeddingDimensionError(
                    f"Batch dimension {dims.pop()} does not match stored "
                    f"dimensions {sorted(store_dims)}"
                )
            others = unembedded - sum(1 for e in replaced if e.embedding is None)
            if others:
                raise EmbeddingDimensionError(
                    f"Corpus holds {others} entries without embeddings"
                )
        else:
            others = (total - unembedded) - sum(1 for e in replaced if e.embedding is not None)
            if others:
                raise EmbeddingDimensionError(
                    f"Corpus holds {others} embedded entries; batch has no embeddings"
                )

    def ingest(
        self,
        entries: list[CorpusEntry],
        embed: bool | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict:
        """Ingest a batch of entries.

        Args:
            entries: Entries to store
            embed: Embed entries before storing. Defaults to True when an
                   embedder is configured.
            on_progress: Optional callback(event, current, total, message)

        Returns:
            Dict with ingestion statistics:
            - chunks: number of textbook chunks stored
            - resources: number of reference resources stored
            - embedded: number of stored entries carrying an embedding

        Raises:
            DuplicateEntryError: Repeated id in the batch or id used by the other kind
            EmbeddingDimensionError: Batch breaks the corpus embedding rule
            ValueError: embed=True without an embedder
        """

        def progress(event: str, current: int, total: int, message: str = "") -> None:
            if on_progress:
                on_progress(event, current, total, message)

        if not entries:
            return {"chunks": 0, "resources": 0, "embedded": 0}

        if embed is None:
            embed = self.embedder is not None
        if embed and self.embedder is None:
            raise ValueError("Cannot embed entries without an embedder")

        progress("validating", 0, 1, f"Validating {len(entries)} entries...")
        self._check_ids(entries)
        progress("validating", 1, 1, "Validation complete")

        if embed:
            progress("embedding", 0, 1, f"Embedding {len(entries)} entries...")
            entries = self.embedder.embed_entries(entries)
            progress("embedding", 1, 1, "Embedding complete")
        self._check_embeddings(entries)

        progress("storing", 0, 1, f"Storing {len(entries)} entries...")
        self.corpus_store.put_many(entries)
        progress("storing", 1, 1, "Storing complete")

        embedded = [e for e in entries if e.embedding is not None]
        if self.vector_index is not None and embedded:
            progress("indexing", 0, 1, f"Indexing {len(embedded)} entries...")
            self.vector_index.add(embedded)
            progress("indexing", 1, 1, "Indexing complete")

        kinds = Counter(e.kind for e in entries)
        logger.info(
            "Ingested %d chunks and %d resources (%d embedded)",
            kinds["chunk"],
            kinds["resource"],
            len(embedded),
        )
        return {
            "chunks": kinds["chunk"],
            "resources": kinds["resource"],
            "embedded": len(embedded),
        }
