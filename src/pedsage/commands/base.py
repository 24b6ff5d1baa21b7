# src/pedsage/commands/base.py
"""Base types for the commands layer.

This module defines the data structures used by all commands:
- Progress callbacks for long-running operations
- Result types for each command
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from pedsage.config import ConfigError, create_pedsage, get_pedsage_config

if TYPE_CHECKING:
    from pedsage.config import PedSageConfig
    from pedsage.models import ChatMessage, ChatSession, SearchResult
    from pedsage.pedsage import PedSage


class CommandStage(Enum):
    """Stages of command execution for progress reporting."""

    # Ingest stages
    VALIDATING = "Validating"
    EMBEDDING = "Embedding"
    STORING = "Storing"
    INDEXING = "Indexing"

    # General stages
    LOADING = "Loading"
    PROCESSING = "Processing"
    COMPLETE = "Complete"


@dataclass
class ProgressUpdate:
    """Progress update for long-running operations.

    Attributes:
        stage: Current stage of the operation
        current: Current item number
        total: Total number of items (0 for indeterminate)
        message: Optional status message
    """

    stage: CommandStage
    current: int
    total: int
    message: str | None = None

    @property
    def is_indeterminate(self) -> bool:
        """True if progress is indeterminate (total unknown)."""
        return self.total == 0

    @property
    def percentage(self) -> int:
        """Progress as percentage (0-100). Returns 0 if indeterminate."""
        if self.total == 0:
            return 0
        return int(100 * self.current / self.total)


# Callback type for progress updates
ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class CommandResult:
    """Base result type for commands."""

    success: bool
    error: str | None = None


@dataclass
class FileIngestResult:
    """Result for a single file ingestion."""

    filepath: str
    chunks: int = 0
    resources: int = 0
    embedded: int = 0


@dataclass
class IngestResult(CommandResult):
    """Result of the ingest command.

    Attributes:
        files_processed: Number of files successfully processed
        files_failed: Number of files that failed
        total_chunks: Total textbook chunks stored
        total_resources: Total reference resources stored
        total_embedded: Total stored entries with embeddings
        file_results: Per-file results
        errors: List of (filepath, error_message) for failed files
    """

    files_processed: int = 0
    files_failed: int = 0
    total_chunks: int = 0
    total_resources: int = 0
    total_embedded: int = 0
    file_results: list[FileIngestResult] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class SourceHit:
    """A single ranked corpus entry."""

    entry_id: str
    kind: str
    label: str
    content: str
    score: float

    @classmethod
    def from_result(cls, result: SearchResult) -> SourceHit:
        entry = result.entry
        return cls(
            entry_id=entry.id,
            kind=entry.kind,
            label=entry.source_label,
            content=entry.content,
            score=result.similarity_score,
        )


@dataclass
class CitationInfo:
    """A citation attached to an assistant message."""

    source: str
    entry_id: str
    page_number: int | None = None


@dataclass
class SearchCommandResult(CommandResult):
    """Result of the search command."""

    query: str = ""
    results: list[SourceHit] = field(default_factory=list)


@dataclass
class AskResult(CommandResult):
    """Result of the ask command.

    Attributes:
        query: The user's message
        session_id: Session the exchange was stored in
        answer: The assistant's response text
        citations: Citations stored with the answer, in order
        sources: Every ranked source, cited or not
    """

    query: str = ""
    session_id: str | None = None
    answer: str | None = None
    citations: list[CitationInfo] = field(default_factory=list)
    sources: list[SourceHit] = field(default_factory=list)


@dataclass
class SessionInfo:
    """Information about a chat session."""

    session_id: str
    title: str
    updated_at: str

    @classmethod
    def from_session(cls, session: ChatSession) -> SessionInfo:
        return cls(
            session_id=session.id,
            title=session.title,
            updated_at=session.updated_at.isoformat(timespec="seconds"),
        )


@dataclass
class SessionsResult(CommandResult):
    """Result of the session commands (list, create, rename, delete)."""

    sessions: list[SessionInfo] = field(default_factory=list)


@dataclass
class MessageInfo:
    """A stored chat message."""

    role: str
    content: str
    created_at: str
    citations: list[CitationInfo] = field(default_factory=list)

    @classmethod
    def from_message(cls, message: ChatMessage) -> MessageInfo:
        return cls(
            role=message.role,
            content=message.content,
            created_at=message.created_at.isoformat(timespec="seconds"),
            citations=[
                CitationInfo(source=c.source, entry_id=c.entry_id, page_number=c.page_number)
                for c in message.citations or []
            ],
        )


@dataclass
class HistoryResult(CommandResult):
    """Result of the history command."""

    session_id: str = ""
    messages: list[MessageInfo] = field(default_factory=list)


@dataclass
class StatusResult(CommandResult):
    """Result of the status command.

    Attributes:
        provider: Configured provider ("litellm" or "none")
        data_dir: Data directory path
        total_chunks: Textbook chunks in the corpus
        total_resources: Reference resources in the corpus
        without_embedding: Entries with no embedding
        embedding_dimensions: Distinct embedding lengths in the corpus
    """

    provider: str = "none"
    data_dir: str = ""
    total_chunks: int = 0
    total_resources: int = 0
    without_embedding: int = 0
    embedding_dimensions: list[int] = field(default_factory=list)


def open_pedsage(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> tuple[PedSage, PedSageConfig] | str:
    """Build a PedSage from configuration.

    Returns:
        (instance, config), or an error message for the command result
    """
    config = get_pedsage_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return config.message
    try:
        return create_pedsage(config), config
    except Exception as e:
        return f"Failed to create PedSage: {e}"
