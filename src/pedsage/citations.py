# src/pedsage/citations.py
"""Citation building from ranked search results."""

from pedsage.exceptions import CitationError
from pedsage.models import Citation, CorpusEntry, SearchResult
from pedsage.stores import CorpusStore


def citation_for(entry: CorpusEntry) -> Citation:
    """Citation for a single entry: chapter title and page for chunks, title for resources."""
    if entry.kind == "chunk":
        return Citation(
            source=entry.chapter_title, page_number=entry.page_number, entry_id=entry.id
        )
    return Citation(source=entry.title, entry_id=entry.id)


class CitationBuilder:
    """Maps ranked results to citations, preserving rank order.

    If the same entry appears more than once only its first citation is kept.
    """

    def __init__(self, corpus_store: CorpusStore | None = None) -> None:
        """Initialize the builder.

        Args:
            corpus_store: If given, every cited id is checked to still exist in it.
        """
        self.corpus_store = corpus_store

    def build(self, results: list[SearchResult]) -> list[Citation]:
        """Build the ordered citation list. Empty iff ``results`` is empty."""
        citations: list[Citation] = []
        seen: set[str] = set()
        for result in results:
            if result.entry.id in seen:
                continue
            seen.add(result.entry.id)
            citations.append(citation_for(result.entry))

        if citations and self.corpus_store is not None:
            ids = [c.entry_id for c in citations]
            found = {entry.id for entry in self.corpus_store.get_many(ids)}
            missing = [entry_id for entry_id in ids if entry_id not in found]
            if missing:
                raise CitationError(f"Cited entries not in corpus: {', '.join(missing)}")

        return citations
