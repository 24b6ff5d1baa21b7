# src/pedsage/configuration/storage/local.py
"""Local filesystem storage configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pedsage.stores import CorpusStore, MessageStore, SessionStore, VectorIndex


@dataclass(frozen=True)
class LocalStorage:
    """Local filesystem storage using SQLite and, optionally, Chroma.

    All data is persisted to the specified directory:
    - corpus.db: Textbook chunks and reference resources (SQLite)
    - chat.db: Chat sessions and messages (SQLite)
    - chroma/: Entry embeddings, when use_chroma is set (ChromaDB)

    The Chroma index requires the chromadb package: pip install pedsage[chroma]

    Args:
        data_dir: Base directory for all storage files.
                  Created if it doesn't exist.
        use_chroma: Score embeddings through a Chroma index instead of the
                    embeddings stored with each entry.

    Example:
        storage = LocalStorage("./pedsage_data")
    """

    data_dir: str
    use_chroma: bool = False

    def build_stores(
        self,
    ) -> tuple[CorpusStore, SessionStore, MessageStore, VectorIndex | None]:
        """Build all storage components.

        Creates the data directory if it doesn't exist. Sessions are wired to
        the message store so deleting a session deletes its messages.

        Returns:
            Tuple of (corpus_store, session_store, message_store, vector_index)
        """
        from pedsage.stores import SQLiteCorpusStore, SQLiteMessageStore, SQLiteSessionStore

        Path(self.data_dir).mkdir(parents=True, exist_ok=True)

        corpus_store = SQLiteCorpusStore(os.path.join(self.data_dir, "corpus.db"))
        chat_db = os.path.join(self.data_dir, "chat.db")
        message_store = SQLiteMessageStore(chat_db)
        session_store = SQLiteSessionStore(chat_db, message_store=message_store)

        vector_index = None
        if self.use_chroma:
            from pedsage.stores.chroma import ChromaVectorIndex

            vector_index = ChromaVectorIndex(os.path.join(self.data_dir, "chroma"))

        return corpus_store, session_store, message_store, vector_index
