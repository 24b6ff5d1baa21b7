# src/pedsage/configuration/base.py
"""Protocol definitions for configuration objects.

Provider and storage configurations are structural: any frozen dataclass with
the right methods satisfies them. Stores themselves use ABCs (stores/base.py)
because implementations inherit shared behavior.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pedsage.composer import ResponseComposer
    from pedsage.embedder import Embedder
    from pedsage.providers import LLMClient
    from pedsage.settings import Settings
    from pedsage.stores import CorpusStore, MessageStore, SessionStore, VectorIndex


@runtime_checkable
class ProviderConfig(Protocol):
    """Protocol for provider configurations.

    Provider configurations build the model-backed components:
    - Embedder: Embeds queries and corpus entries for vector scoring
    - LLMClient: Completions for LLM response composition
    - ResponseComposer: The composer selected by Settings.composer
    """

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build an embedder for creating vector embeddings."""
        ...

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        """Build an LLM client for general-purpose completions."""
        ...

    def build_composer(self, settings: Settings) -> ResponseComposer:
        """Build the response composer named by ``settings.composer``."""
        ...


@runtime_checkable
class StorageConfig(Protocol):
    """Protocol for storage configurations.

    Storage configurations build the data stores:
    - CorpusStore: Textbook chunks and reference resources
    - SessionStore: Chat sessions
    - MessageStore: Chat messages
    - VectorIndex: Optional nearest-neighbour index over entry embeddings
    """

    def build_stores(
        self,
    ) -> tuple[CorpusStore, SessionStore, MessageStore, VectorIndex | None]:
        """Build all storage components.

        Returns:
            Tuple of (corpus_store, session_store, message_store, vector_index)
        """
        ...
