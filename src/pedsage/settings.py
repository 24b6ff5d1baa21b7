# src/pedsage/settings.py
"""Behavioral settings for pedsage.

Settings are passed programmatically; the library does not read environment
variables. ``pedsage.config`` reads YAML and ``PEDSAGE_*`` env vars at the
application layer and builds a Settings from them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ComposerName = Literal["template", "llm"]


class Settings(BaseModel):
    """Behavioral settings for pedsage.

    Example:
        settings = Settings(similarity_threshold=0.7, default_limit=5)
    """

    # Retrieval
    similarity_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    default_limit: int = Field(default=10, gt=0)
    candidate_limit_per_kind: int | None = Field(default=200, gt=0)

    # Share of the result budget reserved for textbook chunks when both kinds
    # pass the threshold; the rest goes to reference resources.
    chunk_share: float = Field(default=0.6, ge=0.0, le=1.0)

    # Composition
    composer: ComposerName = "template"
    synthesis_prompt: str | None = None
    synthesis_temperature: float | None = 0.2
    excerpt_chars: int = Field(default=240, gt=0)

    # Retry configuration (LiteLLM handles exponential backoff for RateLimitError)
    num_retries: int = Field(default=3, ge=0)

    # Texts per embedding request during ingestion
    embedding_batch_size: int = Field(default=100, gt=0)
