"""pedsage - cited answers from a pediatric reference corpus.

A retrieval-and-citation pipeline for a conversational assistant: lexical
candidate matching, relevance ranking, citation building and response
composition over textbook chunks and reference resources, with chat sessions
and messages persisted alongside.

Quick Start (lexical ranking, template responses):
    from pedsage import LocalStorage, PedSage

    sage = PedSage(storage=LocalStorage("./data"))
    sage.ingest_file("corpus.jsonl")

    session = sage.create_session("user-1", "Asthma questions")
    response = sage.process_query(session.id, "What is the treatment for asthma?")
    print(response.message.content)

With LiteLLM (embedding ranking, LLM-composed responses):
    from pedsage import LiteLLMProvider, LocalStorage, PedSage, Settings

    sage = PedSage(
        provider=LiteLLMProvider(llm="openai/gpt-4o", embedding="text-embedding-3-small"),
        storage=LocalStorage("./data"),
        settings=Settings(composer="llm"),
    )
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("pedsage")
except PackageNotFoundError:
    # Source-tree fallback (e.g. running tests without installing the wheel).
    import tomllib
    from pathlib import Path

    def _read_version_from_pyproject() -> str | None:
        for parent in Path(__file__).resolve().parents:
            pyproject = parent / "pyproject.toml"
            if pyproject.exists():
                data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
                version = data.get("project", {}).get("version")
                return str(version) if version is not None else None
        return None

    __version__ = _read_version_from_pyproject() or "unknown"

# Pipeline components
from pedsage.citations import CitationBuilder
from pedsage.composer import LLMComposer, ResponseComposer, TemplateComposer

# Configuration objects
from pedsage.configuration import (
    LiteLLMProvider,
    LocalStorage,
    ProviderConfig,
    StorageConfig,
)
from pedsage.embedder import ClientEmbedder, Embedder
from pedsage.exceptions import (
    CitationError,
    CompositionError,
    DuplicateEntryError,
    EmbeddingDimensionError,
    InvalidRequestError,
    PedSageError,
    PersistenceError,
    RetrievalError,
    SessionNotFoundError,
)
from pedsage.ingestor import Ingestor
from pedsage.matcher import LexicalMatcher
from pedsage.models import (
    ChatMessage,
    ChatResponse,
    ChatSession,
    Citation,
    CorpusEntry,
    ReferenceResource,
    SearchResult,
    TextbookChunk,
)
from pedsage.orchestrator import ChatOrchestrator, QueryStage

# Central configuration
from pedsage.pedsage import PedSage

# Provider ABCs
from pedsage.providers import EmbeddingClient, LLMClient
from pedsage.ranker import KindQuota, RelevanceRanker
from pedsage.settings import Settings

# Storage ABCs
from pedsage.stores import (
    CorpusStore,
    MessageStore,
    SessionStore,
    SQLiteCorpusStore,
    SQLiteMessageStore,
    SQLiteSessionStore,
    VectorIndex,
)

__all__ = [
    # Version
    "__version__",
    # Models
    "TextbookChunk",
    "ReferenceResource",
    "CorpusEntry",
    "Citation",
    "ChatMessage",
    "ChatSession",
    "SearchResult",
    "ChatResponse",
    # Config
    "Settings",
    # Configuration objects
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
    # Storage ABCs
    "CorpusStore",
    "MessageStore",
    "SessionStore",
    "VectorIndex",
    "SQLiteCorpusStore",
    "SQLiteMessageStore",
    "SQLiteSessionStore",
    # Embedding
    "Embedder",
    "ClientEmbedder",
    # Provider ABCs
    "LLMClient",
    "EmbeddingClient",
    # Pipeline
    "LexicalMatcher",
    "RelevanceRanker",
    "KindQuota",
    "CitationBuilder",
    "ResponseComposer",
    "TemplateComposer",
    "LLMComposer",
    "ChatOrchestrator",
    "QueryStage",
    "Ingestor",
    # Central configuration
    "PedSage",
    # Errors
    "PedSageError",
    "InvalidRequestError",
    "SessionNotFoundError",
    "RetrievalError",
    "PersistenceError",
    "CompositionError",
    "CitationError",
    "DuplicateEntryError",
    "EmbeddingDimensionError",
]
