# src/pedsage/embedder/__init__.py
"""Embedding functionality for pedsage."""

from pedsage.embedder.base import Embedder, entry_embedding_text
from pedsage.embedder.client import ClientEmbedder

__all__ = ["Embedder", "ClientEmbedder", "entry_embedding_text"]
