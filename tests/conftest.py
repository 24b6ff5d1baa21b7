"""Shared pytest fixtures."""

import contextlib
import os
import tempfile

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for stores."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir

        # Cleanup ChromaDB's shared system cache to release file handles
        # See: https://github.com/chroma-core/chroma/issues/5868
        try:
            from chromadb.api.shared_system_client import SharedSystemClient

            if hasattr(SharedSystemClient, "_identifier_to_system"):
                identifiers_to_remove = [
                    identifier
                    for identifier in list(SharedSystemClient._identifier_to_system.keys())
                    if tmpdir in str(identifier)
                ]
                for identifier in identifiers_to_remove:
                    if identifier in SharedSystemClient._identifier_to_system:
                        system = SharedSystemClient._identifier_to_system.pop(identifier)
                        with contextlib.suppress(Exception):
                            system.stop()
        except Exception:
            pass  # Best effort cleanup - ChromaDB may be absent or its internals may change


@pytest.fixture
def corpus_store(temp_dir):
    from pedsage.stores import SQLiteCorpusStore

    return SQLiteCorpusStore(os.path.join(temp_dir, "corpus.db"))


@pytest.fixture
def message_store(temp_dir):
    from pedsage.stores import SQLiteMessageStore

    return SQLiteMessageStore(os.path.join(temp_dir, "chat.db"))


@pytest.fixture
def session_store(temp_dir, message_store):
    from pedsage.stores import SQLiteSessionStore

    return SQLiteSessionStore(os.path.join(temp_dir, "chat.db"), message_store=message_store)


@pytest.fixture
def make_chunk():
    """Factory for textbook chunks with sensible defaults."""
    from pedsage.models import TextbookChunk

    def _make(id: str = "chunk-1", **overrides) -> TextbookChunk:
        fields = {
            "chapter_title": "General Pediatrics",
            "content": "Routine well-child visits track growth and development.",
            "page_number": 1,
            "chunk_index": 0,
        }
        fields.update(overrides)
        return TextbookChunk(id=id, **fields)

    return _make


@pytest.fixture
def make_resource():
    """Factory for reference resources with sensible defaults."""
    from pedsage.models import ReferenceResource

    def _make(id: str = "res-1", **overrides) -> ReferenceResource:
        fields = {
            "title": "General Protocol",
            "content": "Follow local policy.",
            "resource_kind": "protocol",
            "category": "General",
        }
        fields.update(overrides)
        return ReferenceResource(id=id, **fields)

    return _make


@pytest.fixture
def asthma_chunk(make_chunk):
    return make_chunk(
        "chunk_asthma_001",
        chapter_title="Respiratory Disorders",
        section_title="Pediatric Asthma",
        content=(
            "Asthma is a chronic respiratory condition affecting many children. "
            "Management includes bronchodilators and anti-inflammatory medications."
        ),
        page_number=245,
        chunk_index=1,
    )


@pytest.fixture
def fever_resource(make_resource):
    return make_resource(
        "resource_fever_001",
        title="Fever Protocol",
        content="Antipyretic dosing by weight for febrile infants and toddlers.",
        resource_kind="protocol",
        category="Emergency",
    )


@pytest.fixture
def seeded_corpus(corpus_store, asthma_chunk, fever_resource):
    """Corpus with one asthma chunk and one fever resource."""
    corpus_store.put_many([asthma_chunk, fever_resource])
    return corpus_store


# Keywords the mock embedder turns into vector dimensions
EMBEDDING_VOCAB = ["asthma", "fever", "seizure", "rash", "dosing"]


@pytest.fixture
def mock_embedder():
    """Create a mock embedder with deterministic keyword-count vectors."""
    from pedsage.embedder import Embedder

    class MockEmbedder(Embedder):
        """Mock embedder counting vocabulary words in the text."""

        def __init__(self) -> None:
            self.calls: list[list[str]] = []

        def embed_text(self, text: str) -> list[float]:
            return self.embed_texts([text])[0]

        def embed_texts(self, texts: list[str]) -> list[list[float]]:
            self.calls.append(list(texts))
            return [
                [float(text.lower().count(word)) for word in EMBEDDING_VOCAB] for text in texts
            ]

    return MockEmbedder()


@pytest.fixture
def mock_llm_client():
    """Create a mock LLM client that records prompts and returns a fixed answer."""
    from pedsage.providers import LLMClient

    class MockLLMClient(LLMClient):
        def __init__(self) -> None:
            self.calls: list[dict] = []
            self.answer = "Inhaled bronchodilators relieve acute symptoms [1]."

        def complete(self, messages: list[dict], temperature: float | None = None) -> str:
            self.calls.append({"messages": messages, "temperature": temperature})
            return self.answer

    return MockLLMClient()


@pytest.fixture
def mock_provider(mock_embedder, mock_llm_client):
    """Create a mock provider satisfying the ProviderConfig protocol."""
    from dataclasses import dataclass
    from typing import Any

    from pedsage.composer import LLMComposer, TemplateComposer

    @dataclass(frozen=True)
    class MockProvider:
        _embedder: Any
        _llm_client: Any

        def build_embedder(self, settings: Any) -> Any:
            return self._embedder

        def build_llm_client(self, settings: Any = None) -> Any:
            return self._llm_client

        def build_composer(self, settings: Any) -> Any:
            if settings.composer == "llm":
                return LLMComposer(self._llm_client)
            return TemplateComposer(excerpt_chars=settings.excerpt_chars)

    return MockProvider(_embedder=mock_embedder, _llm_client=mock_llm_client)


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run in an empty directory with no PEDSAGE_* variables or config file."""
    for key in list(os.environ):
        if key.startswith("PEDSAGE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path
