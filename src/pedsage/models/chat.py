# src/pedsage/models/chat.py
"""Chat session and message data models."""

from datetime import UTC, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from pedsage.models.citation import Citation

Role = Literal["user", "assistant"]


class ChatMessage(BaseModel):
    """A single immutable turn in a session."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    session_id: str
    role: Role
    content: str
    citations: list[Citation] | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _check_citations(self) -> "ChatMessage":
        if self.citations is not None and not self.citations:
            self.citations = None
        if self.role == "user" and self.citations is not None:
            raise ValueError("user messages cannot carry citations")
        return self


class ChatSession(BaseModel):
    """A container grouping one user's ordered chat messages."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    title: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
