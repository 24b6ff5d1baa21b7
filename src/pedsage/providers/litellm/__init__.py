# src/pedsage/providers/litellm/__init__.py
"""LiteLLM provider clients for pedsage.

- LiteLLMClient: LLM completion using LiteLLM
- LiteLLMEmbeddingClient: Embeddings using LiteLLM
- ChatModels / EmbeddingModels: Curated model constants
"""

from pedsage.providers.litellm.client import LiteLLMClient, LiteLLMEmbeddingClient
from pedsage.providers.litellm.models import ChatModels, EmbeddingModels

__all__ = ["LiteLLMClient", "LiteLLMEmbeddingClient", "ChatModels", "EmbeddingModels"]
