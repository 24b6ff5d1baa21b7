# src/pedsage/embedder/base.py
"""Embedder abstract base class."""

from abc import ABC, abstractmethod

from pedsage.models import CorpusEntry


def entry_embedding_text(entry: CorpusEntry) -> str:
    """Text embedded for a corpus entry: its title-like fields, then its body."""
    return "\n".join([*entry.title_fields, entry.content])


class Embedder(ABC):
    """Abstract base class for embedding generation.

    Subclasses must implement embed_text and embed_texts.
    """

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        ...

    @abstractmethod
    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        ...

    def embed_entries(self, entries: list[CorpusEntry]) -> list[CorpusEntry]:
        """Return copies of the entries with their embeddings filled in."""
        if not entries:
            return []
        embeddings = self.embed_texts([entry_embedding_text(e) for e in entries])
        return [
            e.model_copy(update={"embedding": emb})
            for e, emb in zip(entries, embeddings, strict=True)
        ]
