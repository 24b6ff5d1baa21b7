# src/pedsage/models/entry.py
"""Corpus entry data models."""

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field

ResourceKind = Literal["protocol", "guideline", "reference", "calculation"]
EntryKind = Literal["chunk", "resource"]


def _now() -> datetime:
    return datetime.now(UTC)


class TextbookChunk(BaseModel):
    """A passage of the textbook, addressed by chapter, page and position."""

    kind: Literal["chunk"] = "chunk"
    id: str = Field(min_length=1)
    chapter_title: str
    section_title: str | None = None
    content: str
    page_number: int = Field(gt=0)
    chunk_index: int = Field(ge=0)  # Canonical order within the chapter
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def source_label(self) -> str:
        return self.chapter_title

    @property
    def title_fields(self) -> list[str]:
        """Title-like fields searched alongside the body text."""
        if self.section_title:
            return [self.chapter_title, self.section_title]
        return [self.chapter_title]

    @property
    def searchable_text(self) -> str:
        return "\n".join([*self.title_fields, self.content]).lower()


class ReferenceResource(BaseModel):
    """A curated reference resource (protocol, guideline, ...)."""

    kind: Literal["resource"] = "resource"
    id: str = Field(min_length=1)
    title: str
    content: str
    resource_kind: ResourceKind
    category: str
    tags: list[str] = Field(default_factory=list)
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def source_label(self) -> str:
        return self.title

    @property
    def title_fields(self) -> list[str]:
        """Title-like fields searched alongside the body text."""
        return [self.title, self.category]

    @property
    def searchable_text(self) -> str:
        return "\n".join([*self.title_fields, self.content]).lower()


CorpusEntry = Annotated[TextbookChunk | ReferenceResource, Field(discriminator="kind")]
"""Any retrievable unit of the corpus. Switch on ``entry.kind``."""
