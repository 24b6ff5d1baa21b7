# tests/test_ingestor.py
"""Tests for the ingestion pipeline."""

from unittest.mock import MagicMock

import pytest

from pedsage.exceptions import DuplicateEntryError, EmbeddingDimensionError
from pedsage.ingestor import Ingestor
from pedsage.stores import VectorIndex


class TestIngestWithoutEmbedder:
    def test_stores_entries(self, corpus_store, asthma_chunk, fever_resource):
        stats = Ingestor(corpus_store).ingest([asthma_chunk, fever_resource])

        assert stats == {"chunks": 1, "resources": 1, "embedded": 0}
        assert corpus_store.get("chunk_asthma_001") is not None
        assert corpus_store.get("resource_fever_001") is not None

    def test_empty_batch(self, corpus_store):
        assert Ingestor(corpus_store).ingest([]) == {"chunks": 0, "resources": 0, "embedded": 0}

    def test_embed_requires_embedder(self, corpus_store, asthma_chunk):
        with pytest.raises(ValueError):
            Ingestor(corpus_store).ingest([asthma_chunk], embed=True)

    def test_keeps_supplied_embeddings(self, corpus_store, make_chunk):
        stats = Ingestor(corpus_store).ingest(
            [make_chunk("a", embedding=[1.0, 0.0]), make_chunk("b", embedding=[0.0, 1.0])]
        )
        assert stats["embedded"] == 2
        assert corpus_store.embedding_dimensions() == {2}

    def test_reingest_replaces(self, corpus_store, make_chunk):
        ingestor = Ingestor(corpus_store)
        ingestor.ingest([make_chunk("a", content="old")])
        ingestor.ingest([make_chunk("a", content="new")])

        assert corpus_store.get("a").content == "new"
        assert corpus_store.count_by_kind()["chunk"] == 1


class TestIngestWithEmbedder:
    def test_embeds_entries(self, corpus_store, mock_embedder, asthma_chunk, fever_resource):
        stats = Ingestor(corpus_store, embedder=mock_embedder).ingest(
            [asthma_chunk, fever_resource]
        )

        assert stats == {"chunks": 1, "resources": 1, "embedded": 2}
        stored = corpus_store.get("chunk_asthma_001")
        # "Pediatric Asthma" section title plus "Asthma is..." in the body
        assert stored.embedding == [2.0, 0.0, 0.0, 0.0, 0.0]
        assert corpus_store.count_without_embedding() == 0

    def test_embed_false_skips_embedder(self, corpus_store, mock_embedder, asthma_chunk):
        Ingestor(corpus_store, embedder=mock_embedder).ingest([asthma_chunk], embed=False)
        assert mock_embedder.calls == []

    def test_replacing_unembedded_entries(self, corpus_store, mock_embedder, make_chunk):
        Ingestor(corpus_store).ingest([make_chunk("a")])
        stats = Ingestor(corpus_store, embedder=mock_embedder).ingest([make_chunk("a")])

        assert stats["embedded"] == 1
        assert corpus_store.count_without_embedding() == 0

    def test_adds_to_vector_index(self, corpus_store, mock_embedder, asthma_chunk):
        index = MagicMock(spec=VectorIndex)
        Ingestor(corpus_store, embedder=mock_embedder, vector_index=index).ingest([asthma_chunk])

        [indexed] = index.add.call_args.args[0]
        assert indexed.id == "chunk_asthma_001"
        assert indexed.embedding is not None

    def test_progress_events(self, corpus_store, mock_embedder, asthma_chunk):
        events = []
        Ingestor(corpus_store, embedder=mock_embedder).ingest(
            [asthma_chunk], on_progress=lambda event, current, total, msg: events.append(event)
        )
        assert list(dict.fromkeys(events)) == ["validating", "embedding", "storing"]


class TestIdRules:
    def test_duplicate_in_batch(self, corpus_store, make_chunk):
        with pytest.raises(DuplicateEntryError):
            Ingestor(corpus_store).ingest([make_chunk("a"), make_chunk("a")])
        assert corpus_store.get("a") is None

    def test_id_taken_by_other_kind(self, corpus_store, make_chunk, make_resource):
        Ingestor(corpus_store).ingest([make_chunk("shared")])
        with pytest.raises(DuplicateEntryError):
            Ingestor(corpus_store).ingest([make_resource("shared")])


class TestEmbeddingRules:
    def test_partial_batch_rejected(self, corpus_store, make_chunk):
        with pytest.raises(EmbeddingDimensionError):
            Ingestor(corpus_store).ingest([make_chunk("a", embedding=[1.0]), make_chunk("b")])

    def test_mixed_dimensions_rejected(self, corpus_store, make_chunk):
        batch = [make_chunk("a", embedding=[1.0]), make_chunk("b", embedding=[1.0, 0.0])]
        with pytest.raises(EmbeddingDimensionError):
            Ingestor(corpus_store).ingest(batch)

    def test_dimension_must_match_corpus(self, corpus_store, mock_embedder, make_chunk):
        Ingestor(corpus_store, embedder=mock_embedder).ingest([make_chunk("a")])
        with pytest.raises(EmbeddingDimensionError):
            Ingestor(corpus_store).ingest([make_chunk("b", embedding=[1.0, 0.0])])
        assert corpus_store.get("b") is None

    def test_unembedded_batch_into_embedded_corpus(self, corpus_store, mock_embedder, make_chunk):
        Ingestor(corpus_store, embedder=mock_embedder).ingest([make_chunk("a")])
        with pytest.raises(EmbeddingDimensionError):
            Ingestor(corpus_store).ingest([make_chunk("b")])

    def test_embedded_batch_into_unembedded_corpus(self, corpus_store, mock_embedder, make_chunk):
        Ingestor(corpus_store).ingest([make_chunk("a")])
        with pytest.raises(EmbeddingDimensionError):
            Ingestor(corpus_store, embedder=mock_embedder).ingest([make_chunk("b")])
