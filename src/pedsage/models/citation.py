# src/pedsage/models/citation.py
"""Citation data model."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Citation(BaseModel):
    """A user-facing reference to the corpus entry a response drew on.

    ``entry_id`` points back at the entry; the citation does not copy it.
    Records exported by the earlier chat system name the id ``chunk_id``;
    both names load so those exports import unchanged.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    page_number: int | None = None  # Textbook chunks only
    entry_id: str = Field(validation_alias=AliasChoices("entry_id", "chunk_id"))

    def to_record(self) -> dict[str, Any]:
        """Persisted shape. ``page_number`` is omitted, not null, when absent."""
        return self.model_dump(exclude_none=True)
