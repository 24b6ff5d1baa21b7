# src/pedsage/stores/__init__.py
"""Storage abstractions for pedsage.

The Chroma vector index lives in ``pedsage.stores.chroma`` and needs the
``chroma`` extra.
"""

from pedsage.stores.base import CorpusStore, MessageStore, SessionStore, VectorIndex
from pedsage.stores.sqlite_chat import SQLiteMessageStore, SQLiteSessionStore
from pedsage.stores.sqlite_corpus import SQLiteCorpusStore

__all__ = [
    "CorpusStore",
    "MessageStore",
    "SessionStore",
    "VectorIndex",
    "SQLiteCorpusStore",
    "SQLiteMessageStore",
    "SQLiteSessionStore",
]
