# src/pedsage/commands/ask.py
"""Ask and search commands - query the knowledge base."""

from __future__ import annotations

from pathlib import Path

from pedsage.commands.base import (
    AskResult,
    CitationInfo,
    SearchCommandResult,
    SourceHit,
    open_pedsage,
)

TITLE_CHARS = 50


def session_title(message: str) -> str:
    """Title for a session started by ``message``."""
    title = " ".join(message.split())
    if len(title) > TITLE_CHARS:
        title = title[: TITLE_CHARS - 3].rstrip() + "..."
    return title or "New Chat"


def ask(
    message: str,
    session_id: str | None = None,
    user_id: str | None = None,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> AskResult:
    """Send a message to a chat session and return the stored answer.

    Args:
        message: The user's message
        session_id: Existing session; a new one is created when omitted
        user_id: Owner of a newly created session (default: configured user)
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        AskResult with the answer, its citations and every ranked source
    """
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return AskResult(success=False, query=message, error=opened)
    sage, config = opened

    try:
        if session_id is None:
            session = sage.create_session(user_id or config.user_id, session_title(message))
            session_id = session.id
        response = sage.process_query(session_id, message)
    except Exception as e:
        return AskResult(
            success=False,
            query=message,
            session_id=session_id,
            error=f"Query failed: {e}",
        )
    finally:
        sage.close()

    return AskResult(
        success=True,
        query=message,
        session_id=session_id,
        answer=response.message.content,
        citations=[
            CitationInfo(source=c.source, entry_id=c.entry_id, page_number=c.page_number)
            for c in response.message.citations or []
        ],
        sources=[SourceHit.from_result(r) for r in response.sources],
    )


def search(
    query: str,
    threshold: float | None = None,
    limit: int | None = None,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> SearchCommandResult:
    """Rank corpus entries for a query without storing anything.

    Args:
        query: Free-text query
        threshold: Minimum similarity (default: configured threshold)
        limit: Maximum results (default: configured limit)
        data_dir: Override data directory
        config_path: Override config file path
    """
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return SearchCommandResult(success=False, query=query, error=opened)
    sage, _ = opened

    try:
        results = sage.search(query, threshold=threshold, limit=limit)
    except Exception as e:
        return SearchCommandResult(success=False, query=query, error=f"Search failed: {e}")
    finally:
        sage.close()

    return SearchCommandResult(
        success=True,
        query=query,
        results=[SourceHit.from_result(r) for r in results],
    )
