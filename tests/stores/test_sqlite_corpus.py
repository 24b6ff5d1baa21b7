# tests/stores/test_sqlite_corpus.py
"""Tests for the SQLite corpus store."""

import pytest

from pedsage.exceptions import DuplicateEntryError
from pedsage.models import ReferenceResource, TextbookChunk


class TestPutAndGet:
    def test_chunk_roundtrip(self, corpus_store, asthma_chunk):
        corpus_store.put(asthma_chunk)

        retrieved = corpus_store.get(asthma_chunk.id)
        assert isinstance(retrieved, TextbookChunk)
        assert retrieved.chapter_title == "Respiratory Disorders"
        assert retrieved.section_title == "Pediatric Asthma"
        assert retrieved.page_number == 245
        assert retrieved.chunk_index == 1
        assert retrieved.embedding is None

    def test_resource_roundtrip(self, corpus_store, make_resource):
        resource = make_resource("r1", tags=["fever", "dosing"], embedding=[0.5, 0.25])
        corpus_store.put(resource)

        retrieved = corpus_store.get("r1")
        assert isinstance(retrieved, ReferenceResource)
        assert retrieved.tags == ["fever", "dosing"]
        assert retrieved.embedding == [0.5, 0.25]
        assert retrieved.resource_kind == "protocol"

    def test_get_nonexistent(self, corpus_store):
        assert corpus_store.get("missing") is None

    def test_upsert_updates_content_keeps_created_at(self, corpus_store, make_chunk):
        original = make_chunk("c1", content="first")
        corpus_store.put(original)
        corpus_store.put(make_chunk("c1", content="second"))

        retrieved = corpus_store.get("c1")
        assert retrieved.content == "second"
        assert retrieved.created_at == original.created_at

    def test_id_shared_across_kinds_rejected(self, corpus_store, make_chunk, make_resource):
        corpus_store.put(make_chunk("shared"))
        with pytest.raises(DuplicateEntryError):
            corpus_store.put(make_resource("shared"))

    def test_put_many_is_atomic_on_clash(self, corpus_store, make_chunk, make_resource):
        corpus_store.put(make_resource("taken"))
        with pytest.raises(DuplicateEntryError):
            corpus_store.put_many([make_chunk("fresh"), make_chunk("taken")])
        assert corpus_store.get("fresh") is None


class TestGetManyAndDelete:
    def test_get_many_preserves_order_and_skips_missing(
        self, corpus_store, make_chunk, make_resource
    ):
        corpus_store.put_many([make_chunk("a"), make_resource("b"), make_chunk("c")])

        retrieved = corpus_store.get_many(["c", "missing", "b", "a"])
        assert [e.id for e in retrieved] == ["c", "b", "a"]

    def test_get_many_empty(self, corpus_store):
        assert corpus_store.get_many([]) == []

    def test_delete(self, corpus_store, make_chunk, make_resource):
        corpus_store.put_many([make_chunk("a"), make_resource("b")])
        corpus_store.delete("a")
        corpus_store.delete("b")
        assert corpus_store.get("a") is None
        assert corpus_store.get("b") is None


class TestCandidates:
    def test_matches_body_and_titles(self, seeded_corpus):
        by_body = seeded_corpus.list_candidates_by_terms(["bronchodilators"])
        by_chapter = seeded_corpus.list_candidates_by_terms(["respiratory"])
        by_category = seeded_corpus.list_candidates_by_terms(["emergency"])

        assert [e.id for e in by_body] == ["chunk_asthma_001"]
        assert [e.id for e in by_chapter] == ["chunk_asthma_001"]
        assert [e.id for e in by_category] == ["resource_fever_001"]

    def test_case_insensitive(self, corpus_store, make_chunk):
        corpus_store.put(make_chunk("c1", content="ÉCOLE Asthma Clinic"))
        assert len(corpus_store.list_candidates_by_terms(["asthma"])) == 1
        assert len(corpus_store.list_candidates_by_terms(["école"])) == 1

    def test_any_term_matches(self, seeded_corpus):
        results = seeded_corpus.list_candidates_by_terms(["asthma", "febrile"])
        assert {e.id for e in results} == {"chunk_asthma_001", "resource_fever_001"}

    def test_no_terms(self, seeded_corpus):
        assert seeded_corpus.list_candidates_by_terms([]) == []

    def test_no_match(self, seeded_corpus):
        assert seeded_corpus.list_candidates_by_terms(["quantum"]) == []

    def test_limit_per_kind_keeps_lowest_ids(self, corpus_store, make_chunk, make_resource):
        corpus_store.put_many(
            [make_chunk(f"c{i}", content="asthma") for i in (3, 1, 2)]
            + [make_resource(f"r{i}", content="asthma") for i in (2, 1)]
        )

        results = corpus_store.list_candidates_by_terms(["asthma"], limit_per_kind=2)
        assert [e.id for e in results] == ["c1", "c2", "r1", "r2"]

    def test_like_wildcards_are_literal(self, corpus_store, make_chunk):
        corpus_store.put(make_chunk("c1", content="plain text"))
        assert corpus_store.list_candidates_by_terms(["%"]) == []
        assert corpus_store.list_candidates_by_terms(["_"]) == []

    def test_many_terms_in_one_query(self, corpus_store, make_chunk, make_resource):
        corpus_store.put(make_chunk("c1", content="asthma bronchodilators"))
        corpus_store.put(make_resource("r1", content="fever management"))
        terms = [f"word{i:04d}" for i in range(1500)] + ["asthma"]

        results = corpus_store.list_candidates_by_terms(terms)
        assert [e.id for e in results] == ["c1"]


class TestStatistics:
    def test_count_by_kind(self, seeded_corpus, make_chunk):
        seeded_corpus.put(make_chunk("extra"))
        assert seeded_corpus.count_by_kind() == {"chunk": 2, "resource": 1}

    def test_count_empty(self, corpus_store):
        assert corpus_store.count_by_kind() == {"chunk": 0, "resource": 0}
        assert corpus_store.count_without_embedding() == 0
        assert corpus_store.embedding_dimensions() == set()

    def test_embedding_statistics(self, corpus_store, make_chunk, make_resource):
        corpus_store.put_many(
            [
                make_chunk("a", embedding=[1.0, 0.0, 0.0]),
                make_resource("b", embedding=[0.0, 1.0, 0.0]),
                make_chunk("c"),
            ]
        )
        assert corpus_store.embedding_dimensions() == {3}
        assert corpus_store.count_without_embedding() == 1
