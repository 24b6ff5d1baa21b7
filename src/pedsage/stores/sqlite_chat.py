# src/pedsage/stores/sqlite_chat.py
"""SQLite chat session and message store implementations."""

import json
import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from pedsage.exceptions import SessionNotFoundError
from pedsage.models import ChatMessage, ChatSession, Citation, Role
from pedsage.stores.base import MessageStore, SessionStore

logger = logging.getLogger(__name__)


def _utc(value: datetime) -> datetime:
    """Normalise to aware UTC so stored timestamps compare as strings."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _ts(value: datetime) -> str:
    return _utc(value).isoformat(timespec="microseconds")


class SQLiteMessageStore(MessageStore):
    """SQLite-based chat message store.

    Appends take the database write lock, so concurrent writers to the same
    session are serialized. A timestamp older than the session's latest message
    is raised to match it; ties keep insertion order.
    """

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        """Initialize the SQLite message store.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait for the write lock
        """
        self.db_path = db_path
        self.timeout = timeout
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS chat_messages (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    session_id TEXT NOT NULL,
                    role TEXT NOT NULL,
                    content TEXT NOT NULL,
                    citations TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_message_session "
                "ON chat_messages(session_id, created_at, seq)"
            )
            conn.commit()

    def append(
        self,
        session_id: str,
        role: Role,
        content: str,
        citations: list[Citation] | None,
        timestamp: datetime,
    ) -> ChatMessage:
        """Append a message, keeping the session's timestamps non-decreasing."""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT MAX(created_at) FROM chat_messages WHERE session_id = ?",
                (session_id,),
            ).fetchone()
            created_at = _utc(timestamp)
            if row and row[0] is not None:
                latest = datetime.fromisoformat(row[0])
                if latest > created_at:
                    created_at = latest

            message = ChatMessage(
                session_id=session_id,
                role=role,
                content=content,
                citations=citations,
                created_at=created_at,
            )
            records = (
                json.dumps([c.to_record() for c in message.citations])
                if message.citations is not None
                else None
            )
            conn.execute(
                """
                INSERT INTO chat_messages (id, session_id, role, content, citations, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (message.id, session_id, role, content, records, _ts(created_at)),
            )
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()
        return message

    def list_by_session(self, session_id: str) -> list[ChatMessage]:
        """List a session's messages, oldest first."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "SELECT id, session_id, role, content, citations, created_at "
                "FROM chat_messages WHERE session_id = ? ORDER BY created_at, seq",
                (session_id,),
            )
            return [
                ChatMessage(
                    id=row[0],
                    session_id=row[1],
                    role=row[2],
                    content=row[3],
                    citations=(
                        [Citation.model_validate(c) for c in json.loads(row[4])]
                        if row[4] is not None
                        else None
                    ),
                    created_at=datetime.fromisoformat(row[5]),
                )
                for row in cursor.fetchall()
            ]

    def delete_by_session(self, session_id: str) -> int:
        """Delete all messages of a session."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM chat_messages WHERE session_id = ?", (session_id,))
            conn.commit()
            return cursor.rowcount


class SQLiteSessionStore(SessionStore):
    """SQLite-based chat session store.

    When given a message store, deleting a session also deletes its messages.
    """

    def __init__(self, db_path: str, message_store: MessageStore | None = None) -> None:
        """Initialize the SQLite session store.

        Args:
            db_path: Path to SQLite database file
            message_store: Store whose messages are removed along with their session
        """
        self.db_path = db_path
        self.message_store = message_store
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS chat_sessions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_session_user ON chat_sessions(user_id)")
            conn.commit()

    def create(self, user_id: str, title: str) -> ChatSession:
        """Create and return a new session."""
        session = ChatSession(user_id=user_id, title=title)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO chat_sessions (id, user_id, title, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    session.id,
                    session.user_id,
                    session.title,
                    _ts(session.created_at),
                    _ts(session.updated_at),
                ),
            )
            conn.commit()
        return session

    def get(self, session_id: str) -> ChatSession | None:
        """Retrieve a session by ID."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT id, user_id, title, created_at, updated_at "
                "FROM chat_sessions WHERE id = ?",
                (session_id,),
            ).fetchone()
            if row is None:
                return None
            return ChatSession(
                id=row[0],
                user_id=row[1],
                title=row[2],
                created_at=datetime.fromisoformat(row[3]),
                updated_at=datetime.fromisoformat(row[4]),
            )

    def list_by_user(self, user_id: str) -> list[ChatSession]:
        """List a user's sessions, most recently updated first."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "SELECT id, user_id, title, created_at, updated_at FROM chat_sessions "
                "WHERE user_id = ? ORDER BY updated_at DESC, id",
                (user_id,),
            )
            return [
                ChatSession(
                    id=row[0],
                    user_id=row[1],
                    title=row[2],
                    created_at=datetime.fromisoformat(row[3]),
                    updated_at=datetime.fromisoformat(row[4]),
                )
                for row in cursor.fetchall()
            ]

    def rename(self, session_id: str, title: str) -> ChatSession:
        """Change a session's title and bump its updated_at."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE chat_sessions SET title = ?, updated_at = ? WHERE id = ?",
                (title, _ts(datetime.now(UTC)), session_id),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise SessionNotFoundError(session_id)
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def touch(self, session_id: str, timestamp: datetime) -> None:
        """Move updated_at forward to ``timestamp`` (never backwards)."""
        with sqlite3.connect(self.db_path) as conn:
            exists = conn.execute(
                "SELECT 1 FROM chat_sessions WHERE id = ?", (session_id,)
            ).fetchone()
            if exists is None:
                raise SessionNotFoundError(session_id)
            stamp = _ts(timestamp)
            conn.execute(
                "UPDATE chat_sessions SET updated_at = ? WHERE id = ? AND updated_at < ?",
                (stamp, session_id, stamp),
            )
            conn.commit()

    def delete(self, session_id: str) -> bool:
        """Delete a session, its messages first."""
        if self.message_store is not None:
            removed = self.message_store.delete_by_session(session_id)
            logger.debug("Deleted %d messages of session %s", removed, session_id)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM chat_sessions WHERE id = ?", (session_id,))
            conn.commit()
            return cursor.rowcount > 0
