# src/pedsage/matcher.py
"""Lexical candidate matching."""

from pedsage.models import CorpusEntry
from pedsage.stores import CorpusStore

# Common short function words that never select candidates
STOP_WORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
        "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
        "how", "man", "new", "now", "old", "see", "two", "way", "who", "boy",
        "did", "its", "let", "put", "say", "she", "too", "use",
    }
)  # fmt: skip

MIN_TERM_LENGTH = 3


def extract_terms(query: str) -> list[str]:
    """Salient lowercase terms of a query, in first-occurrence order.

    Tokens shorter than three characters and stop words are dropped.
    """
    terms = [
        token
        for token in query.lower().split()
        if len(token) >= MIN_TERM_LENGTH and token not in STOP_WORDS
    ]
    return list(dict.fromkeys(terms))


class LexicalMatcher:
    """Gathers the unordered candidate set for a query.

    An entry is a candidate when any query term is a case-insensitive substring
    of its body or title-like fields.
    """

    def __init__(self, corpus_store: CorpusStore, limit_per_kind: int | None = None) -> None:
        """Initialize the matcher.

        Args:
            corpus_store: Store to scan for candidates
            limit_per_kind: Pre-ranking cap on candidates per entry kind (None = no cap)
        """
        self.corpus_store = corpus_store
        self.limit_per_kind = limit_per_kind

    def match(self, query: str) -> list[CorpusEntry]:
        """Return the candidate entries for a query.

        A query with no salient terms yields no candidates without touching the store.
        """
        terms = extract_terms(query)
        if not terms:
            return []
        return self.corpus_store.list_candidates_by_terms(terms, self.limit_per_kind)
