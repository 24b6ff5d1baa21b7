# src/pedsage/pedsage.py
"""Central configuration class for pedsage."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from pedsage.composer import ResponseComposer
    from pedsage.configuration import ProviderConfig, StorageConfig
    from pedsage.ingestor import Ingestor, ProgressCallback
    from pedsage.models import ChatMessage, ChatResponse, ChatSession, CorpusEntry, SearchResult
    from pedsage.orchestrator import ChatOrchestrator, Clock, StageCallback
    from pedsage.stores import CorpusStore, MessageStore, SessionStore, VectorIndex

from pedsage.embedder import Embedder
from pedsage.exceptions import SessionNotFoundError
from pedsage.settings import Settings


class PedSage:
    """Central configuration for pedsage stores and components.

    PedSage bundles the stores and model-backed components together so you
    can configure once and answer queries, manage sessions and load the corpus
    from one object.

    There are two ways to create a PedSage instance:

    1. With a storage bundle:

        from pedsage import PedSage, LiteLLMProvider, LocalStorage

        sage = PedSage(
            provider=LiteLLMProvider(
                llm="openai/gpt-5-mini-2025-08-07",
                embedding="openai/text-embedding-3-small",
            ),
            storage=LocalStorage("./data"),
        )

    2. With explicit stores:

        sage = PedSage.from_stores(
            corpus_store=SQLiteCorpusStore("./data/corpus.db"),
            session_store=sessions,
            message_store=messages,
        )

    Without a provider, ranking is lexical and responses use the template
    composer.
    """

    def __init__(
        self,
        *,
        provider: ProviderConfig | None = None,
        # EITHER storage bundle...
        storage: StorageConfig | None = None,
        # ...OR explicit stores
        corpus_store: CorpusStore | None = None,
        session_store: SessionStore | None = None,
        message_store: MessageStore | None = None,
        vector_index: VectorIndex | None = None,
        # Common
        settings: Settings | None = None,
        embedder: Embedder | None = None,
        composer: ResponseComposer | None = None,
    ) -> None:
        """Create a PedSage instance.

        Args:
            provider: Provider configuration (builds embedder and composer).
            storage: Storage bundle (convenience). Mutually exclusive with explicit stores.
                     Example: LocalStorage("./data")
            corpus_store: Explicit corpus store. Use with the other explicit stores.
            session_store: Explicit session store.
            message_store: Explicit message store.
            vector_index: Optional explicit vector index.
            settings: Behavioral settings (similarity_threshold, default_limit, etc.)
            embedder: Embedder override. Takes precedence over the provider's.
            composer: Composer override. Takes precedence over the provider's.

        Raises:
            ValueError: If neither storage bundle nor all explicit stores are provided,
                       or if both are provided.
        """
        self._settings = settings if settings is not None else Settings()

        # Path 1: Storage bundle (convenience)
        if storage is not None:
            if any([corpus_store, session_store, message_store, vector_index]):
                raise ValueError("Cannot mix 'storage' bundle with explicit stores")
            (
                self.corpus_store,
                self.session_store,
                self.message_store,
                self.vector_index,
            ) = storage.build_stores()

        # Path 2: Explicit stores
        elif all([corpus_store, session_store, message_store]):
            self.corpus_store = cast("CorpusStore", corpus_store)
            self.session_store = cast("SessionStore", session_store)
            self.message_store = cast("MessageStore", message_store)
            self.vector_index = vector_index

        else:
            raise ValueError(
                "Must provide either 'storage' bundle or all explicit stores "
                "(corpus_store, session_store, message_store)"
            )

        if embedder is None and provider is not None:
            embedder = provider.build_embedder(self._settings)
        if composer is None and provider is not None:
            composer = provider.build_composer(self._settings)
        if composer is None:
            from pedsage.composer import TemplateComposer

            composer = TemplateComposer(excerpt_chars=self._settings.excerpt_chars)

        self.embedder = embedder
        self.composer = composer

    @classmethod
    def from_stores(
        cls,
        *,
        corpus_store: CorpusStore,
        session_store: SessionStore,
        message_store: MessageStore,
        vector_index: VectorIndex | None = None,
        provider: ProviderConfig | None = None,
        settings: Settings | None = None,
        embedder: Embedder | None = None,
        composer: ResponseComposer | None = None,
    ) -> PedSage:
        """Create PedSage with explicit stores.

        Returns:
            Configured PedSage instance.
        """
        return cls(
            provider=provider,
            corpus_store=corpus_store,
            session_store=session_store,
            message_store=message_store,
            vector_index=vector_index,
            settings=settings,
            embedder=embedder,
            composer=composer,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    def orchestrator(
        self,
        *,
        clock: Clock | None = None,
        on_stage: StageCallback | None = None,
        verify_citations: bool = True,
    ) -> ChatOrchestrator:
        """Create a ChatOrchestrator over this instance's stores.

        Args:
            clock: Time source for message timestamps (default: UTC now)
            on_stage: Optional callback(stage, session_id)
            verify_citations: Check every cited entry still exists in the corpus

        Returns:
            Configured ChatOrchestrator instance.
        """
        from pedsage.citations import CitationBuilder
        from pedsage.orchestrator import ChatOrchestrator

        return ChatOrchestrator(
            session_store=self.session_store,
            message_store=self.message_store,
            matcher=self._matcher(),
            ranker=self._ranker(),
            citation_builder=CitationBuilder(
                self.corpus_store if verify_citations else None
            ),
            composer=self.composer,
            clock=clock,
            on_stage=on_stage,
        )

    def _matcher(self):
        from pedsage.matcher import LexicalMatcher

        return LexicalMatcher(
            self.corpus_store, limit_per_kind=self._settings.candidate_limit_per_kind
        )

    def _ranker(self):
        from pedsage.ranker import KindQuota, RelevanceRanker

        return RelevanceRanker(
            embedder=self.embedder,
            vector_index=self.vector_index,
            threshold=self._settings.similarity_threshold,
            limit=self._settings.default_limit,
            quota=KindQuota(chunk_share=self._settings.chunk_share),
        )

    def ingestor(self) -> Ingestor:
        """Create an Ingestor using this instance's corpus store and embedder."""
        from pedsage.ingestor import Ingestor

        return Ingestor(
            corpus_store=self.corpus_store,
            embedder=self.embedder,
            vector_index=self.vector_index,
        )

    # Queries

    def process_query(self, session_id: str, message: str) -> ChatResponse:
        """Answer a message in a session, storing both sides of the exchange."""
        return self.orchestrator().process_query(session_id, message)

    async def aprocess_query(self, session_id: str, message: str) -> ChatResponse:
        """Async variant of process_query."""
        return await self.orchestrator().aprocess_query(session_id, message)

    def search(
        self,
        query: str,
        *,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """Rank corpus entries for a query without touching any session.

        Args:
            query: Free-text query
            threshold: Minimum similarity (default: settings.similarity_threshold)
            limit: Maximum results (default: settings.default_limit)
        """
        candidates = self._matcher().match(query)
        return self._ranker().rank(query, candidates, threshold=threshold, limit=limit)

    # Sessions

    def create_session(self, user_id: str, title: str = "New Chat") -> ChatSession:
        if not user_id or not user_id.strip():
            raise ValueError("user_id must be a non-empty string")
        return self.session_store.create(user_id, title)

    def list_sessions(self, user_id: str) -> list[ChatSession]:
        """List a user's sessions, most recently updated first."""
        return self.session_store.list_by_user(user_id)

    def rename_session(self, session_id: str, title: str) -> ChatSession:
        return self.session_store.rename(session_id, title)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and its messages. Returns False if it did not exist."""
        return self.session_store.delete(session_id)

    def get_messages(self, session_id: str) -> list[ChatMessage]:
        """List a session's messages, oldest first.

        Raises:
            SessionNotFoundError: Unknown session id
        """
        if self.session_store.get(session_id) is None:
            raise SessionNotFoundError(session_id)
        return self.message_store.list_by_session(session_id)

    # Corpus

    def ingest(
        self,
        entries: list[CorpusEntry],
        *,
        embed: bool | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict:
        """Validate, embed (when an embedder is configured) and store entries.

        Returns:
            Dict with "chunks", "resources" and "embedded" counts
        """
        return self.ingestor().ingest(entries, embed=embed, on_progress=on_progress)

    def ingest_file(
        self,
        filepath: str,
        *,
        embed: bool | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict:
        """Load a .json or .jsonl corpus file and ingest its entries."""
        from pedsage.loaders import load_corpus_file

        entries = load_corpus_file(filepath)
        return self.ingest(entries, embed=embed, on_progress=on_progress)

    def stats(self) -> dict:
        """Corpus statistics: entries per kind, unembedded count, dimensions."""
        counts = self.corpus_store.count_by_kind()
        return {
            "chunks": counts.get("chunk", 0),
            "resources": counts.get("resource", 0),
            "without_embedding": self.corpus_store.count_without_embedding(),
            "embedding_dimensions": sorted(self.corpus_store.embedding_dimensions()),
        }

    def close(self) -> None:
        """Release resources held by the vector index, if any."""
        close = getattr(self.vector_index, "close", None)
        if callable(close):
            close()
