# src/pedsage/stores/base.py
"""Abstract base classes for storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from pedsage.models import ChatMessage, ChatSession, Citation, CorpusEntry, EntryKind, Role


class CorpusStore(ABC):
    """Abstract base class for corpus entry storage.

    Holds textbook chunks and reference resources. Entry ids are unique across
    both kinds. Pure storage: no ranking.
    """

    @abstractmethod
    def put(self, entry: CorpusEntry) -> None:
        """Store an entry, updating content/embedding if the id already exists."""
        ...

    @abstractmethod
    def put_many(self, entries: list[CorpusEntry]) -> None:
        """Store multiple entries."""
        ...

    @abstractmethod
    def get(self, entry_id: str) -> CorpusEntry | None:
        """Retrieve an entry by ID. Returns None if not found."""
        ...

    @abstractmethod
    def get_many(self, entry_ids: list[str]) -> list[CorpusEntry]:
        """Retrieve multiple entries by ID. Skips missing entries."""
        ...

    @abstractmethod
    def delete(self, entry_id: str) -> None:
        """Delete an entry by ID."""
        ...

    @abstractmethod
    def list_candidates_by_terms(
        self, terms: list[str], limit_per_kind: int | None = None
    ) -> list[CorpusEntry]:
        """List entries whose body or title-like fields contain any of the terms.

        Matching is a case-insensitive substring test. Results are capped at
        ``limit_per_kind`` per entry kind, taking entries in id order.
        """
        ...

    @abstractmethod
    def count_by_kind(self) -> dict[EntryKind, int]:
        """Count entries per kind."""
        ...

    @abstractmethod
    def embedding_dimensions(self) -> set[int]:
        """Distinct embedding lengths present in the store."""
        ...

    @abstractmethod
    def count_without_embedding(self) -> int:
        """Count entries that have no embedding."""
        ...


class MessageStore(ABC):
    """Abstract base class for chat message storage.

    Implementations serialize appends per session and never let a session's
    timestamps go backwards.
    """

    @abstractmethod
    def append(
        self,
        session_id: str,
        role: Role,
        content: str,
        citations: list[Citation] | None,
        timestamp: datetime,
    ) -> ChatMessage:
        """Append a message to a session and return it as stored."""
        ...

    @abstractmethod
    def list_by_session(self, session_id: str) -> list[ChatMessage]:
        """List a session's messages, oldest first."""
        ...

    @abstractmethod
    def delete_by_session(self, session_id: str) -> int:
        """Delete all messages of a session. Returns the number deleted."""
        ...


class SessionStore(ABC):
    """Abstract base class for chat session storage."""

    @abstractmethod
    def create(self, user_id: str, title: str) -> ChatSession:
        """Create and return a new session."""
        ...

    @abstractmethod
    def get(self, session_id: str) -> ChatSession | None:
        """Retrieve a session by ID. Returns None if not found."""
        ...

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[ChatSession]:
        """List a user's sessions, most recently updated first."""
        ...

    @abstractmethod
    def rename(self, session_id: str, title: str) -> ChatSession:
        """Change a session's title. Raises SessionNotFoundError if missing."""
        ...

    @abstractmethod
    def touch(self, session_id: str, timestamp: datetime) -> None:
        """Mark a session as updated at ``timestamp``."""
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Delete a session and its messages. Returns False if it did not exist."""
        ...


class VectorIndex(ABC):
    """Vector similarity lookups over corpus entry embeddings.

    Lets the ranker delegate cosine scoring to a dedicated index instead of
    reading embeddings off the entries.
    """

    @abstractmethod
    def add(self, entries: list[CorpusEntry]) -> None:
        """Index the embeddings of the given entries. Entries without one are skipped."""
        ...

    @abstractmethod
    def similarities(self, embedding: list[float], entry_ids: list[str]) -> dict[str, float]:
        """Cosine similarity in [-1, 1] between ``embedding`` and each indexed id.

        Ids that are not indexed are absent from the result.
        """
        ...

    @abstractmethod
    def delete(self, entry_ids: list[str]) -> None:
        """Remove entries from the index."""
        ...
