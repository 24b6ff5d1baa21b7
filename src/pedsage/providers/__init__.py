# src/pedsage/providers/__init__.py
"""Provider implementations for pedsage.

Usage:
    from pedsage.providers import LLMClient, EmbeddingClient
    from pedsage.providers.litellm import LiteLLMClient, ChatModels
"""

from pedsage.providers.base import EmbeddingClient, LLMClient
from pedsage.providers.litellm import (
    ChatModels,
    EmbeddingModels,
    LiteLLMClient,
    LiteLLMEmbeddingClient,
)

__all__ = [
    # ABCs
    "LLMClient",
    "EmbeddingClient",
    # Model constants
    "ChatModels",
    "EmbeddingModels",
    # LiteLLM clients
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
]
