# src/pedsage/stores/sqlite_corpus.py
"""SQLite corpus store implementation."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from pedsage.exceptions import DuplicateEntryError
from pedsage.models import CorpusEntry, EntryKind, ReferenceResource, TextbookChunk
from pedsage.stores.base import CorpusStore

logger = logging.getLogger(__name__)

_CHUNK_COLUMNS = (
    "id, chapter_title, section_title, content, page_number, chunk_index, "
    "embedding, created_at, updated_at"
)
_RESOURCE_COLUMNS = (
    "id, title, content, resource_kind, category, tags, embedding, created_at, updated_at"
)

# Columns matched by list_candidates_by_terms, per table
_CHUNK_MATCH_COLUMNS = ("content", "chapter_title", "COALESCE(section_title, '')")
_RESOURCE_MATCH_COLUMNS = ("content", "title", "category")


def _lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def _dump_embedding(embedding: list[float] | None) -> str | None:
    return json.dumps(embedding) if embedding is not None else None


def _load_embedding(raw: str | None) -> list[float] | None:
    return json.loads(raw) if raw is not None else None


def _row_to_chunk(row: tuple) -> TextbookChunk:
    return TextbookChunk(
        id=row[0],
        chapter_title=row[1],
        section_title=row[2],
        content=row[3],
        page_number=row[4],
        chunk_index=row[5],
        embedding=_load_embedding(row[6]),
        created_at=datetime.fromisoformat(row[7]),
        updated_at=datetime.fromisoformat(row[8]),
    )


def _row_to_resource(row: tuple) -> ReferenceResource:
    return ReferenceResource(
        id=row[0],
        title=row[1],
        content=row[2],
        resource_kind=row[3],
        category=row[4],
        tags=json.loads(row[5]),
        embedding=_load_embedding(row[6]),
        created_at=datetime.fromisoformat(row[7]),
        updated_at=datetime.fromisoformat(row[8]),
    )


def _match_clause(columns: tuple[str, ...], terms: list[str]) -> tuple[str, list[str]]:
    """Build an OR of case-insensitive substring tests, one per column.

    The terms travel as a single JSON array so the expression stays the same
    size however many terms the query has.
    """
    encoded = json.dumps([term.lower() for term in terms])
    tests = [
        f"EXISTS (SELECT 1 FROM json_each(?) WHERE instr(pedsage_lower({column}), value) > 0)"
        for column in columns
    ]
    return " OR ".join(tests), [encoded] * len(columns)


class SQLiteCorpusStore(CorpusStore):
    """SQLite-based corpus store.

    Chunks and resources live in separate tables; the store enforces that an id
    is never used by both.
    """

    def __init__(self, db_path: str) -> None:
        """Initialize the SQLite store."""
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        # SQLite's LOWER() only folds ASCII
        conn.create_function("pedsage_lower", 1, _lower, deterministic=True)
        return conn

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS textbook_chunks (
                    id TEXT PRIMARY KEY,
                    chapter_title TEXT NOT NULL,
                    section_title TEXT,
                    content TEXT NOT NULL,
                    page_number INTEGER NOT NULL,
                    chunk_index INTEGER NOT NULL,
                    embedding TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reference_resources (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    resource_kind TEXT NOT NULL,
                    category TEXT NOT NULL,
                    tags TEXT NOT NULL,
                    embedding TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_chunk_chapter "
                "ON textbook_chunks(chapter_title, chunk_index)"
            )
            conn.commit()

    def _put(self, conn: sqlite3.Connection, entry: CorpusEntry) -> None:
        if entry.kind == "chunk":
            other_table = "reference_resources"
        else:
            other_table = "textbook_chunks"
        clash = conn.execute(f"SELECT 1 FROM {other_table} WHERE id = ?", (entry.id,)).fetchone()
        if clash is not None:
            raise DuplicateEntryError(
                f"Entry id '{entry.id}' is already used by an entry of another kind"
            )

        if entry.kind == "chunk":
            conn.execute(
                f"""
                INSERT INTO textbook_chunks ({_CHUNK_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    chapter_title = excluded.chapter_title,
                    section_title = excluded.section_title,
                    content = excluded.content,
                    page_number = excluded.page_number,
                    chunk_index = excluded.chunk_index,
                    embedding = excluded.embedding,
                    updated_at = excluded.updated_at
                """,
                (
                    entry.id,
                    entry.chapter_title,
                    entry.section_title,
                    entry.content,
                    entry.page_number,
                    entry.chunk_index,
                    _dump_embedding(entry.embedding),
                    _ts(entry.created_at),
                    _ts(entry.updated_at),
                ),
            )
        else:
            conn.execute(
                f"""
                INSERT INTO reference_resources ({_RESOURCE_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    content = excluded.content,
                    resource_kind = excluded.resource_kind,
                    category = excluded.category,
                    tags = excluded.tags,
                    embedding = excluded.embedding,
                    updated_at = excluded.updated_at
                """,
                (
                    entry.id,
                    entry.title,
                    entry.content,
                    entry.resource_kind,
                    entry.category,
                    json.dumps(entry.tags),
                    _dump_embedding(entry.embedding),
                    _ts(entry.created_at),
                    _ts(entry.updated_at),
                ),
            )

    def put(self, entry: CorpusEntry) -> None:
        """Store an entry; on an existing id only content, embedding and updated_at change."""
        with self._connect() as conn:
            self._put(conn, entry)
            conn.commit()

    def put_many(self, entries: list[CorpusEntry]) -> None:
        """Store multiple entries in one transaction."""
        if not entries:
            return
        with self._connect() as conn:
            for entry in entries:
                self._put(conn, entry)
            conn.commit()
        logger.debug("Stored %d corpus entries in %s", len(entries), self.db_path)

    def get(self, entry_id: str) -> CorpusEntry | None:
        """Retrieve an entry by ID."""
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_CHUNK_COLUMNS} FROM textbook_chunks WHERE id = ?", (entry_id,)
            ).fetchone()
            if row is not None:
                return _row_to_chunk(row)
            row = conn.execute(
                f"SELECT {_RESOURCE_COLUMNS} FROM reference_resources WHERE id = ?", (entry_id,)
            ).fetchone()
            if row is not None:
                return _row_to_resource(row)
            return None

    def get_many(self, entry_ids: list[str]) -> list[CorpusEntry]:
        """Retrieve multiple entries by ID, in the order requested."""
        if not entry_ids:
            return []
        placeholders = ",".join("?" * len(entry_ids))
        found: dict[str, CorpusEntry] = {}
        with self._connect() as conn:
            for row in conn.execute(
                f"SELECT {_CHUNK_COLUMNS} FROM textbook_chunks WHERE id IN ({placeholders})",
                entry_ids,
            ).fetchall():
                found[row[0]] = _row_to_chunk(row)
            for row in conn.execute(
                f"SELECT {_RESOURCE_COLUMNS} FROM reference_resources "
                f"WHERE id IN ({placeholders})",
                entry_ids,
            ).fetchall():
                found[row[0]] = _row_to_resource(row)
        return [found[entry_id] for entry_id in dict.fromkeys(entry_ids) if entry_id in found]

    def delete(self, entry_id: str) -> None:
        """Delete an entry by ID."""
        with self._connect() as conn:
            conn.execute("DELETE FROM textbook_chunks WHERE id = ?", (entry_id,))
            conn.execute("DELETE FROM reference_resources WHERE id = ?", (entry_id,))
            conn.commit()

    def list_candidates_by_terms(
        self, terms: list[str], limit_per_kind: int | None = None
    ) -> list[CorpusEntry]:
        """List entries matching any term in their body or title-like fields."""
        if not terms:
            return []
        limit = limit_per_kind if limit_per_kind is not None else -1  # -1 = no limit

        chunk_clause, chunk_params = _match_clause(_CHUNK_MATCH_COLUMNS, terms)
        resource_clause, resource_params = _match_clause(_RESOURCE_MATCH_COLUMNS, terms)

        with self._connect() as conn:
            chunk_rows = conn.execute(
                f"SELECT {_CHUNK_COLUMNS} FROM textbook_chunks "
                f"WHERE {chunk_clause} ORDER BY id LIMIT ?",
                [*chunk_params, limit],
            ).fetchall()
            resource_rows = conn.execute(
                f"SELECT {_RESOURCE_COLUMNS} FROM reference_resources "
                f"WHERE {resource_clause} ORDER BY id LIMIT ?",
                [*resource_params, limit],
            ).fetchall()

        candidates: list[CorpusEntry] = [_row_to_chunk(row) for row in chunk_rows]
        candidates.extend(_row_to_resource(row) for row in resource_rows)
        return candidates

    def count_by_kind(self) -> dict[EntryKind, int]:
        """Count entries per kind."""
        with self._connect() as conn:
            chunks = conn.execute("SELECT COUNT(id) FROM textbook_chunks").fetchone()
            resources = conn.execute("SELECT COUNT(id) FROM reference_resources").fetchone()
        return {"chunk": chunks[0] if chunks else 0, "resource": resources[0] if resources else 0}

    def embedding_dimensions(self) -> set[int]:
        """Distinct embedding lengths present in the store."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT DISTINCT json_array_length(embedding) FROM textbook_chunks "
                "WHERE embedding IS NOT NULL "
                "UNION "
                "SELECT DISTINCT json_array_length(embedding) FROM reference_resources "
                "WHERE embedding IS NOT NULL"
            ).fetchall()
        return {row[0] for row in rows}

    def count_without_embedding(self) -> int:
        """Count entries that have no embedding."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT "
                "(SELECT COUNT(id) FROM textbook_chunks WHERE embedding IS NULL) + "
                "(SELECT COUNT(id) FROM reference_resources WHERE embedding IS NULL)"
            ).fetchone()
        return row[0] if row else 0
