# src/pedsage/providers/litellm/client.py
"""LiteLLM client implementations for LLM and embedding APIs."""

import litellm

from pedsage.providers.base import EmbeddingClient, LLMClient
from pedsage.providers.litellm.models import ChatModels, EmbeddingModels


def _with_api_key(kwargs: dict, api_key: str | None) -> dict:
    if api_key:
        kwargs["api_key"] = api_key
    return kwargs


class LiteLLMClient(LLMClient):
    """LiteLLM-based LLM client used by the LLM response composer.

    Example:
        from pedsage.providers.litellm import LiteLLMClient, ChatModels

        client = LiteLLMClient(model=ChatModels.GPT_5_MINI, num_retries=5)
        answer = client.complete([{"role": "user", "content": "Dosing for croup?"}])
    """

    def __init__(
        self,
        model: str = ChatModels.GEMINI_3_FLASH,
        num_retries: int = 3,
        api_key: str | None = None,
    ) -> None:
        """Initialize the LiteLLM client.

        Args:
            model: LiteLLM model identifier.
            num_retries: Retries on rate limit errors; LiteLLM backs off between them.
            api_key: Optional API key; otherwise LiteLLM reads the provider's env var.
        """
        self.model = model
        self.num_retries = num_retries
        self.api_key = api_key

    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Generate a completion using LiteLLM."""
        kwargs = _with_api_key(
            {
                "model": self.model,
                "messages": messages,
                "drop_params": True,
                "num_retries": self.num_retries,
            },
            self.api_key,
        )
        if temperature is not None:
            kwargs["temperature"] = temperature

        response = litellm.completion(**kwargs)

        if not response.choices:
            raise ValueError(f"LLM returned no choices for model {self.model}")
        content = response.choices[0].message.content
        if content is None:
            raise ValueError(f"LLM returned None content for model {self.model}")
        return str(content)


class LiteLLMEmbeddingClient(EmbeddingClient):
    """LiteLLM-based embedding client.

    Large inputs are split into requests of at most ``batch_size`` texts, so a
    whole corpus file can be embedded without hitting provider input limits.

    Example:
        from pedsage.providers.litellm import LiteLLMEmbeddingClient, EmbeddingModels

        client = LiteLLMEmbeddingClient(model=EmbeddingModels.TEXT_3_SMALL)
        embeddings = client.embed(["febrile seizure", "bronchiolitis"])
    """

    def __init__(
        self,
        model: str = EmbeddingModels.GEMINI_EMBEDDING_001,
        num_retries: int = 3,
        api_key: str | None = None,
        batch_size: int = 100,
    ) -> None:
        """Initialize the LiteLLM embedding client.

        Args:
            model: LiteLLM embedding model identifier.
            num_retries: Number of retries on rate limit errors. Default: 3.
            api_key: Optional API key; otherwise LiteLLM reads the provider's env var.
            batch_size: Maximum texts per embedding request.
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.model = model
        self.num_retries = num_retries
        self.api_key = api_key
        self.batch_size = batch_size

    def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        response = litellm.embedding(
            **_with_api_key(
                {"model": self.model, "input": texts, "num_retries": self.num_retries},
                self.api_key,
            )
        )
        # Providers may return items out of order
        ordered = sorted(response.data, key=lambda item: item["index"])
        if len(ordered) != len(texts):
            raise ValueError(
                f"Embedding model {self.model} returned {len(ordered)} vectors "
                f"for {len(texts)} texts"
            )
        return [item["embedding"] for item in ordered]

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings using LiteLLM, one request per batch."""
        embeddings: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            embeddings.extend(self._embed_batch(texts[start : start + self.batch_size]))
        return embeddings
