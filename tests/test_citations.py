# tests/test_citations.py
"""Tests for citation building."""

import pytest

from pedsage.citations import CitationBuilder, citation_for
from pedsage.exceptions import CitationError
from pedsage.models import SearchResult


def _results(*entries, score=0.9):
    return [SearchResult(entry=e, similarity_score=score) for e in entries]


class TestCitationFor:
    def test_chunk(self, asthma_chunk):
        citation = citation_for(asthma_chunk)
        assert citation.to_record() == {
            "source": "Respiratory Disorders",
            "page_number": 245,
            "entry_id": "chunk_asthma_001",
        }

    def test_resource_has_no_page(self, fever_resource):
        citation = citation_for(fever_resource)
        assert citation.source == "Fever Protocol"
        assert citation.page_number is None
        assert citation.to_record() == {
            "source": "Fever Protocol",
            "entry_id": "resource_fever_001",
        }


class TestCitationBuilder:
    def test_preserves_rank_order(self, asthma_chunk, fever_resource):
        citations = CitationBuilder().build(_results(fever_resource, asthma_chunk))
        assert [c.entry_id for c in citations] == ["resource_fever_001", "chunk_asthma_001"]

    def test_empty(self):
        assert CitationBuilder().build([]) == []

    def test_duplicate_entry_cited_once(self, asthma_chunk):
        citations = CitationBuilder().build(_results(asthma_chunk, asthma_chunk))
        assert len(citations) == 1

    def test_verified_against_store(self, seeded_corpus, asthma_chunk, fever_resource):
        builder = CitationBuilder(seeded_corpus)
        citations = builder.build(_results(asthma_chunk, fever_resource))
        assert len(citations) == 2

    def test_missing_entry_raises(self, seeded_corpus, make_chunk):
        builder = CitationBuilder(seeded_corpus)
        with pytest.raises(CitationError, match="ghost"):
            builder.build(_results(make_chunk("ghost")))
