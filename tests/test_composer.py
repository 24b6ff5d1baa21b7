# tests/test_composer.py
"""Tests for response composition."""

import pytest

from pedsage.citations import CitationBuilder
from pedsage.composer import (
    DISCLAIMER,
    FALLBACK_MESSAGE,
    INTRO,
    LLMComposer,
    TemplateComposer,
    describe_source,
    excerpt,
)
from pedsage.models import Citation, SearchResult


@pytest.fixture
def scenario(asthma_chunk, fever_resource):
    results = [
        SearchResult(entry=asthma_chunk, similarity_score=1.0),
        SearchResult(entry=fever_resource, similarity_score=0.6),
    ]
    return results, CitationBuilder().build(results)


class TestHelpers:
    def test_excerpt_short_text_unchanged(self):
        assert excerpt("  short\n text ") == "short text"

    def test_excerpt_cuts_at_word(self):
        assert excerpt("alpha beta gamma delta", max_chars=12) == "alpha beta..."

    def test_describe_chunk(self, asthma_chunk):
        assert (
            describe_source(asthma_chunk)
            == 'From "Respiratory Disorders" - Pediatric Asthma (Page 245)'
        )

    def test_describe_chunk_without_section(self, make_chunk):
        chunk = make_chunk(chapter_title="Neonatology", page_number=12)
        assert describe_source(chunk) == 'From "Neonatology" (Page 12)'

    def test_describe_resource(self, fever_resource):
        assert describe_source(fever_resource) == 'PROTOCOL: "Fever Protocol" - Emergency'


class TestTemplateComposer:
    def test_fallback_without_citations(self):
        assert TemplateComposer().compose("quantum mechanics", [], []) == FALLBACK_MESSAGE
        assert FALLBACK_MESSAGE.startswith(INTRO)

    def test_lists_sources_in_citation_order(self, scenario):
        results, citations = scenario
        text = TemplateComposer().compose("asthma", results, citations)

        assert text.startswith(INTRO)
        assert text.endswith(DISCLAIMER)
        assert '1. From "Respiratory Disorders" - Pediatric Asthma (Page 245): Asthma is' in text
        assert '2. PROTOCOL: "Fever Protocol" - Emergency: Antipyretic dosing' in text
        assert text.index("1. From") < text.index("2. PROTOCOL")

    def test_excerpt_length(self, scenario):
        results, citations = scenario
        text = TemplateComposer(excerpt_chars=20).compose("asthma", results, citations)
        assert "Asthma is a chronic..." in text

    def test_unmatched_citation(self, scenario):
        results, _ = scenario
        with pytest.raises(ValueError):
            TemplateComposer().compose("x", results, [Citation(source="X", entry_id="ghost")])


class TestLLMComposer:
    def test_fallback_without_citations(self, mock_llm_client):
        composer = LLMComposer(mock_llm_client)
        assert composer.compose("quantum", [], []) == FALLBACK_MESSAGE
        assert mock_llm_client.calls == []

    def test_prompt_numbers_sources(self, mock_llm_client, scenario):
        results, citations = scenario
        LLMComposer(mock_llm_client, temperature=0.0).compose("asthma care", results, citations)

        [call] = mock_llm_client.calls
        assert call["temperature"] == 0.0
        assert call["messages"][0]["role"] == "system"
        prompt = call["messages"][1]["content"]
        assert '[1] From "Respiratory Disorders"' in prompt
        assert '[2] PROTOCOL: "Fever Protocol"' in prompt
        assert "Question: asthma care" in prompt

    def test_answer_followed_by_sources_and_disclaimer(self, mock_llm_client, scenario):
        results, citations = scenario
        text = LLMComposer(mock_llm_client).compose("asthma", results, citations)

        assert text.startswith(mock_llm_client.answer)
        assert "Sources:\n[1] From" in text
        assert text.endswith(DISCLAIMER)

    def test_custom_prompt_template(self, mock_llm_client, scenario):
        results, citations = scenario
        composer = LLMComposer(mock_llm_client, prompt_template="Q={query}\n{context}")
        composer.compose("asthma", results, citations)
        assert mock_llm_client.calls[0]["messages"][1]["content"].startswith("Q=asthma\n[1]")

    def test_empty_answer_raises(self, mock_llm_client, scenario):
        results, citations = scenario
        mock_llm_client.answer = "   "
        with pytest.raises(ValueError):
            LLMComposer(mock_llm_client).compose("asthma", results, citations)
