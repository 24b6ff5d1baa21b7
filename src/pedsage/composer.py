# src/pedsage/composer.py
"""Response composition from ranked, cited results.

Every composer honours the same contract: sources are enumerated 1..n in
citation order, text is grounded in the retrieved entries, and the response
ends with the professional-advice disclaimer. With no citations the fixed
fallback message is returned instead.
"""

import re
from abc import ABC, abstractmethod

from pedsage.models import Citation, CorpusEntry, SearchResult
from pedsage.providers import LLMClient

INTRO = "Based on the available pediatric literature, "
DISCLAIMER = "Please consult with healthcare professionals for specific medical advice."
FALLBACK_MESSAGE = (
    INTRO
    + "I couldn't find specific information related to your query in the current "
    "knowledge base. Please consult with healthcare professionals for medical advice."
)

SYNTHESIS_PROMPT = """Answer the question using ONLY the numbered sources below.
Cite sources inline with their bracketed number, e.g. [1] or [2].
If the sources do not contain the answer, say so. Do not add outside knowledge.

Sources:
{context}

Question: {query}

Answer:"""

SYSTEM_PROMPT = "You are a grounded pediatric reference assistant."


def excerpt(text: str, max_chars: int = 240) -> str:
    """Whitespace-collapsed prefix of ``text``, cut at a word boundary."""
    flat = re.sub(r"\s+", " ", text).strip()
    if len(flat) <= max_chars:
        return flat
    cut = flat[:max_chars].rsplit(" ", 1)[0]
    return cut.rstrip(",;:") + "..."


def describe_source(entry: CorpusEntry) -> str:
    """One-line label naming where an entry comes from."""
    if entry.kind == "chunk":
        section = f" - {entry.section_title}" if entry.section_title else ""
        return f'From "{entry.chapter_title}"{section} (Page {entry.page_number})'
    return f'{entry.resource_kind.upper()}: "{entry.title}" - {entry.category}'


def cited_entries(results: list[SearchResult], citations: list[Citation]) -> list[CorpusEntry]:
    """Entries in citation order. Raises ValueError if a citation has no result."""
    by_id: dict[str, CorpusEntry] = {}
    for result in results:
        by_id.setdefault(result.entry.id, result.entry)
    try:
        return [by_id[citation.entry_id] for citation in citations]
    except KeyError as e:
        raise ValueError(f"Citation {e.args[0]} does not match any search result") from e


class ResponseComposer(ABC):
    """Abstract base class for response composition."""

    @abstractmethod
    def compose(
        self, query: str, results: list[SearchResult], citations: list[Citation]
    ) -> str:
        """Compose the assistant's response text."""
        ...


class TemplateComposer(ResponseComposer):
    """Deterministic composer listing each cited source with an excerpt."""

    def __init__(self, excerpt_chars: int = 240) -> None:
        self.excerpt_chars = excerpt_chars

    def compose(
        self, query: str, results: list[SearchResult], citations: list[Citation]
    ) -> str:
        if not citations:
            return FALLBACK_MESSAGE

        lines = [
            f"{i}. {describe_source(entry)}: {excerpt(entry.content, self.excerpt_chars)}"
            for i, entry in enumerate(cited_entries(results, citations), 1)
        ]
        return (
            INTRO
            + "I found relevant information from the following sources:\n\n"
            + "\n".join(lines)
            + "\n\n"
            + DISCLAIMER
        )


class LLMComposer(ResponseComposer):
    """Composer that asks an LLM to answer from the numbered sources.

    The model's answer is followed by a numbered source list generated from
    the citations, so numbering always matches the citation list whatever
    the model writes.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_template: str | None = None,
        temperature: float | None = 0.2,
    ) -> None:
        """Initialize the composer.

        Args:
            llm_client: Client used for generation
            prompt_template: Template with {context} and {query} placeholders
            temperature: Sampling temperature for generation
        """
        self.llm_client = llm_client
        self.prompt_template = prompt_template or SYNTHESIS_PROMPT
        self.temperature = temperature

    def compose(
        self, query: str, results: list[SearchResult], citations: list[Citation]
    ) -> str:
        if not citations:
            return FALLBACK_MESSAGE

        entries = cited_entries(results, citations)
        context = "\n\n".join(
            f"[{i}] {describe_source(entry)}\n{entry.content}"
            for i, entry in enumerate(entries, 1)
        )
        prompt = self.prompt_template.format(context=context, query=query)

        answer = self.llm_client.complete(
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
        ).strip()
        if not answer:
            raise ValueError("LLM returned an empty answer")

        sources = "\n".join(
            f"[{i}] {describe_source(entry)}" for i, entry in enumerate(entries, 1)
        )
        return f"{answer}\n\nSources:\n{sources}\n\n{DISCLAIMER}"
