# src/pedsage/configuration/__init__.py
"""Configuration objects for pedsage.

Instead of factory methods, you pass configuration objects that know how to
build their components.

Provider configurations (build model-backed components):
- LiteLLMProvider: Uses LiteLLM for LLM and embedding calls

Storage configurations (build data stores):
- LocalStorage: SQLite (plus optional Chroma) in a local directory

Example:
    from pedsage import PedSage, LiteLLMProvider, LocalStorage

    sage = PedSage(
        provider=LiteLLMProvider(llm="openai/gpt-4o", embedding="text-embedding-3-small"),
        storage=LocalStorage("./data"),
    )
"""

from pedsage.configuration.base import ProviderConfig, StorageConfig
from pedsage.configuration.providers import LiteLLMProvider
from pedsage.configuration.storage import LocalStorage

__all__ = [
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
]
