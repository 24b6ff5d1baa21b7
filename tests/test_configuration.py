# tests/test_configuration.py
"""Tests for provider and storage configuration objects."""

import dataclasses
import os

import pytest

from pedsage.composer import LLMComposer, TemplateComposer
from pedsage.configuration import LiteLLMProvider, LocalStorage, ProviderConfig, StorageConfig
from pedsage.embedder import ClientEmbedder
from pedsage.providers.litellm import LiteLLMClient, LiteLLMEmbeddingClient
from pedsage.settings import Settings
from pedsage.stores import SQLiteCorpusStore, SQLiteMessageStore, SQLiteSessionStore


@pytest.fixture
def provider():
    return LiteLLMProvider(
        llm="openai/gpt-5-mini",
        embedding="openai/text-embedding-3-small",
        llm_api_key="llm-key",
        embedding_api_key="embed-key",
    )


class TestLiteLLMProvider:
    def test_satisfies_protocol(self, provider):
        assert isinstance(provider, ProviderConfig)

    def test_frozen(self, provider):
        with pytest.raises(dataclasses.FrozenInstanceError):
            provider.llm = "other"

    def test_build_embedder(self, provider):
        embedder = provider.build_embedder(Settings(num_retries=7, embedding_batch_size=16))

        assert isinstance(embedder, ClientEmbedder)
        client = embedder._client
        assert isinstance(client, LiteLLMEmbeddingClient)
        assert client.model == "openai/text-embedding-3-small"
        assert client.num_retries == 7
        assert client.api_key == "embed-key"
        assert client.batch_size == 16

    def test_build_llm_client(self, provider):
        client = provider.build_llm_client()
        assert isinstance(client, LiteLLMClient)
        assert client.num_retries == 3
        assert client.api_key == "llm-key"

    def test_build_template_composer(self, provider):
        composer = provider.build_composer(Settings(excerpt_chars=99))
        assert isinstance(composer, TemplateComposer)
        assert composer.excerpt_chars == 99

    def test_build_llm_composer(self, provider):
        composer = provider.build_composer(
            Settings(
                composer="llm",
                synthesis_prompt="{context}|{query}",
                synthesis_temperature=0.0,
            )
        )
        assert isinstance(composer, LLMComposer)
        assert composer.prompt_template == "{context}|{query}"
        assert composer.temperature == 0.0
        assert composer.llm_client.model == "openai/gpt-5-mini"


class TestLocalStorage:
    def test_satisfies_protocol(self, temp_dir):
        assert isinstance(LocalStorage(temp_dir), StorageConfig)

    def test_build_stores(self, temp_dir):
        data_dir = os.path.join(temp_dir, "nested", "data")
        corpus, sessions, messages, index = LocalStorage(data_dir).build_stores()

        assert isinstance(corpus, SQLiteCorpusStore)
        assert isinstance(sessions, SQLiteSessionStore)
        assert isinstance(messages, SQLiteMessageStore)
        assert index is None
        assert os.path.exists(os.path.join(data_dir, "corpus.db"))
        assert os.path.exists(os.path.join(data_dir, "chat.db"))

    def test_sessions_delete_their_messages(self, temp_dir):
        _, sessions, messages, _ = LocalStorage(temp_dir).build_stores()
        assert sessions.message_store is messages

    def test_chroma_index(self, temp_dir):
        pytest.importorskip("chromadb")
        from pedsage.stores.chroma import ChromaVectorIndex

        *_, index = LocalStorage(temp_dir, use_chroma=True).build_stores()
        assert isinstance(index, ChromaVectorIndex)
        index.close()
