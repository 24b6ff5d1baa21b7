# src/pedsage/commands/__init__.py
"""UI-agnostic command layer for pedsage.

Commands return data structures, allowing UIs to render results appropriately.

Usage:
    from pedsage.commands import ask, ingest, status

    result = ingest.ingest("./corpus.jsonl", on_progress=my_callback)
    result = ask.ask("What is the treatment for asthma?")
    result = status.status()
"""

from pedsage.commands import ask, ingest, sessions, status
from pedsage.commands.base import (
    AskResult,
    CitationInfo,
    CommandResult,
    CommandStage,
    FileIngestResult,
    HistoryResult,
    IngestResult,
    MessageInfo,
    ProgressCallback,
    ProgressUpdate,
    SearchCommandResult,
    SessionInfo,
    SessionsResult,
    SourceHit,
    StatusResult,
)

__all__ = [
    # Base types
    "CommandStage",
    "ProgressUpdate",
    "ProgressCallback",
    "CommandResult",
    # Result types
    "IngestResult",
    "FileIngestResult",
    "AskResult",
    "SearchCommandResult",
    "SourceHit",
    "CitationInfo",
    "SessionsResult",
    "SessionInfo",
    "HistoryResult",
    "MessageInfo",
    "StatusResult",
    # Command modules
    "ingest",
    "ask",
    "sessions",
    "status",
]
