# src/pedsage/models/__init__.py
"""Data models for pedsage."""

from pedsage.models.chat import ChatMessage, ChatSession, Role
from pedsage.models.citation import Citation
from pedsage.models.entry import (
    CorpusEntry,
    EntryKind,
    ReferenceResource,
    ResourceKind,
    TextbookChunk,
)
from pedsage.models.results import ChatResponse, SearchResult

__all__ = [
    "TextbookChunk",
    "ReferenceResource",
    "CorpusEntry",
    "EntryKind",
    "ResourceKind",
    "Citation",
    "ChatMessage",
    "ChatSession",
    "Role",
    "SearchResult",
    "ChatResponse",
]
