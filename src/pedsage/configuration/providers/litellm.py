# src/pedsage/configuration/providers/litellm.py
"""LiteLLM provider configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pedsage.composer import ResponseComposer
    from pedsage.embedder import Embedder
    from pedsage.providers import LLMClient
    from pedsage.settings import Settings


@dataclass(frozen=True)
class LiteLLMProvider:
    """Provider configuration using LiteLLM for LLM and embedding calls.

    Args:
        llm: LiteLLM model identifier for response composition.
             Examples: "openai/gpt-5-mini-2025-08-07", "gemini/gemini-3-flash-preview"
        embedding: LiteLLM model identifier for embeddings.
                   Examples: "openai/text-embedding-3-small", "gemini/gemini-embedding-001"
        llm_api_key: Optional API key for LLM calls. Default: provider env var.
        embedding_api_key: Optional API key for embedding calls.

    Example:
        provider = LiteLLMProvider(
            llm="openai/gpt-5-mini-2025-08-07",
            embedding="openai/text-embedding-3-small",
        )
    """

    llm: str
    embedding: str
    llm_api_key: str | None = None
    embedding_api_key: str | None = None

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build a ClientEmbedder using the LiteLLM embedding client.

        Args:
            settings: Settings containing num_retries and embedding_batch_size.
        """
        from pedsage.embedder import ClientEmbedder
        from pedsage.providers.litellm import LiteLLMEmbeddingClient

        embedding_client = LiteLLMEmbeddingClient(
            model=self.embedding,
            num_retries=settings.num_retries,
            api_key=self.embedding_api_key,
            batch_size=settings.embedding_batch_size,
        )
        return ClientEmbedder(embedding_client=embedding_client)

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        """Build a LiteLLMClient for general-purpose LLM calls.

        Args:
            settings: Optional settings containing num_retries. If None,
                     uses default retry value.
        """
        from pedsage.providers.litellm import LiteLLMClient

        num_retries = settings.num_retries if settings else 3
        return LiteLLMClient(model=self.llm, num_retries=num_retries, api_key=self.llm_api_key)

    def build_composer(self, settings: Settings) -> ResponseComposer:
        """Build the composer named by settings.composer.

        Returns:
            LLMComposer if composer="llm", TemplateComposer otherwise.
        """
        from pedsage.composer import LLMComposer, TemplateComposer

        if settings.composer == "template":
            return TemplateComposer(excerpt_chars=settings.excerpt_chars)
        return LLMComposer(
            llm_client=self.build_llm_client(settings),
            prompt_template=settings.synthesis_prompt,
            temperature=settings.synthesis_temperature,
        )
