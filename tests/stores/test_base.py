# tests/stores/test_base.py
"""Tests for the store abstract base classes."""

import pytest

from pedsage.stores import (
    CorpusStore,
    MessageStore,
    SessionStore,
    SQLiteCorpusStore,
    SQLiteMessageStore,
    SQLiteSessionStore,
    VectorIndex,
)


class TestAbstractStores:
    @pytest.mark.parametrize("abc", [CorpusStore, MessageStore, SessionStore, VectorIndex])
    def test_cannot_instantiate(self, abc):
        with pytest.raises(TypeError):
            abc()

    def test_sqlite_implementations(self, corpus_store, message_store, session_store):
        assert isinstance(corpus_store, CorpusStore)
        assert isinstance(message_store, MessageStore)
        assert isinstance(session_store, SessionStore)
        assert isinstance(corpus_store, SQLiteCorpusStore)
        assert isinstance(message_store, SQLiteMessageStore)
        assert isinstance(session_store, SQLiteSessionStore)
