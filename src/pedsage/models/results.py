# src/pedsage/models/results.py
"""Result data models for pedsage queries."""

from pydantic import BaseModel, Field

from pedsage.models.chat import ChatMessage
from pedsage.models.entry import CorpusEntry


class SearchResult(BaseModel):
    """A corpus entry paired with its relevance to the query."""

    entry: CorpusEntry
    similarity_score: float = Field(ge=0.0, le=1.0)


class ChatResponse(BaseModel):
    """What a processed query hands back to the caller."""

    message: ChatMessage
    sources: list[SearchResult]  # Every ranked result, cited or not
    user_message: ChatMessage
