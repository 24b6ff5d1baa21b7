# src/pedsage/commands/sessions.py
"""Session commands - list, create, rename and delete chat sessions."""

from __future__ import annotations

from pathlib import Path

from pedsage.commands.base import (
    HistoryResult,
    MessageInfo,
    SessionInfo,
    SessionsResult,
    open_pedsage,
)


def list_sessions(
    user_id: str | None = None,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> SessionsResult:
    """List a user's sessions, most recently updated first."""
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return SessionsResult(success=False, error=opened)
    sage, config = opened

    try:
        sessions = sage.list_sessions(user_id or config.user_id)
    except Exception as e:
        return SessionsResult(success=False, error=f"Failed to list sessions: {e}")
    finally:
        sage.close()

    return SessionsResult(success=True, sessions=[SessionInfo.from_session(s) for s in sessions])


def create_session(
    title: str = "New Chat",
    user_id: str | None = None,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> SessionsResult:
    """Create an empty session."""
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return SessionsResult(success=False, error=opened)
    sage, config = opened

    try:
        session = sage.create_session(user_id or config.user_id, title)
    except Exception as e:
        return SessionsResult(success=False, error=f"Failed to create session: {e}")
    finally:
        sage.close()

    return SessionsResult(success=True, sessions=[SessionInfo.from_session(session)])


def rename_session(
    session_id: str,
    title: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> SessionsResult:
    """Change a session's title."""
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return SessionsResult(success=False, error=opened)
    sage, _ = opened

    try:
        session = sage.rename_session(session_id, title)
    except Exception as e:
        return SessionsResult(success=False, error=str(e))
    finally:
        sage.close()

    return SessionsResult(success=True, sessions=[SessionInfo.from_session(session)])


def delete_session(
    session_id: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> SessionsResult:
    """Delete a session and its messages."""
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return SessionsResult(success=False, error=opened)
    sage, _ = opened

    try:
        deleted = sage.delete_session(session_id)
    except Exception as e:
        return SessionsResult(success=False, error=f"Failed to delete session: {e}")
    finally:
        sage.close()

    if not deleted:
        return SessionsResult(success=False, error=f"Chat session with id {session_id} not found")
    return SessionsResult(success=True)


def history(
    session_id: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> HistoryResult:
    """List a session's messages, oldest first."""
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return HistoryResult(success=False, session_id=session_id, error=opened)
    sage, _ = opened

    try:
        messages = sage.get_messages(session_id)
    except Exception as e:
        return HistoryResult(success=False, session_id=session_id, error=str(e))
    finally:
        sage.close()

    return HistoryResult(
        success=True,
        session_id=session_id,
        messages=[MessageInfo.from_message(m) for m in messages],
    )
