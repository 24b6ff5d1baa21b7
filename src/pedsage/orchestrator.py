# src/pedsage/orchestrator.py
"""Chat query pipeline: persist, retrieve, rank, cite, compose, persist."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from pedsage.citations import CitationBuilder
from pedsage.composer import ResponseComposer, TemplateComposer
from pedsage.exceptions import (
    CompositionError,
    InvalidRequestError,
    PersistenceError,
    RetrievalError,
    SessionNotFoundError,
)
from pedsage.matcher import LexicalMatcher
from pedsage.models import ChatMessage, ChatResponse, Citation, Role
from pedsage.ranker import RelevanceRanker
from pedsage.stores import MessageStore, SessionStore

logger = logging.getLogger(__name__)


class QueryStage(str, Enum):
    """Stages a query passes through, in order."""

    RECEIVED = "received"
    USER_MSG_PERSISTED = "user_msg_persisted"
    CANDIDATES_GATHERED = "candidates_gathered"
    RANKED = "ranked"
    CITED = "cited"
    COMPOSED = "composed"
    ASSISTANT_MSG_PERSISTED = "assistant_msg_persisted"
    RETURNED = "returned"


StageCallback = Callable[[QueryStage, str], None]
"""Callback invoked as a query enters each stage.

Args:
    stage: The stage just reached
    session_id: Session the query belongs to
"""

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class ChatOrchestrator:
    """Runs one user query through the retrieval and citation pipeline.

    The orchestrator keeps no per-request state, so a single instance can serve
    concurrent queries. Ordering of messages within a session is guaranteed by
    the message store.

    Failure behaviour:
    - Validation errors are raised before anything is written.
    - Once the user message is stored it stays stored, even if a later stage
      fails. No stage is retried.
    """

    def __init__(
        self,
        session_store: SessionStore,
        message_store: MessageStore,
        matcher: LexicalMatcher,
        ranker: RelevanceRanker,
        citation_builder: CitationBuilder | None = None,
        composer: ResponseComposer | None = None,
        clock: Clock | None = None,
        on_stage: StageCallback | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            session_store: Store used to validate and touch sessions
            message_store: Store for user and assistant messages
            matcher: Gathers lexical candidates from the corpus
            ranker: Scores and orders candidates
            citation_builder: Maps results to citations (default: unverified)
            composer: Produces the assistant text (default: TemplateComposer)
            clock: Returns the current time for both messages (default: UTC now)
            on_stage: Optional callback(stage, session_id)
        """
        self.session_store = session_store
        self.message_store = message_store
        self.matcher = matcher
        self.ranker = ranker
        self.citation_builder = citation_builder or CitationBuilder()
        self.composer = composer or TemplateComposer()
        self.clock = clock or utc_now
        self.on_stage = on_stage

    def _stage(self, stage: QueryStage, session_id: str) -> None:
        logger.debug("Session %s: %s", session_id, stage.value)
        if self.on_stage:
            self.on_stage(stage, session_id)

    def _validate(self, session_id: str) -> None:
        if not isinstance(session_id, str) or not session_id.strip():
            raise InvalidRequestError("session_id must be a non-empty string")
        if self.session_store.get(session_id) is None:
            raise SessionNotFoundError(session_id)

    def _persist(
        self,
        session_id: str,
        role: Role,
        content: str,
        citations: list[Citation] | None,
        timestamp: datetime,
        user_message_id: str | None = None,
    ) -> ChatMessage:
        try:
            message = self.message_store.append(
                session_id, role, content, citations, timestamp
            )
            self.session_store.touch(session_id, message.created_at)
        except Exception as e:
            raise PersistenceError(
                f"Failed to store {role} message for session {session_id}: {e}",
                role=role,
                user_message_id=user_message_id,
            ) from e
        return message

    def process_query(self, session_id: str, message: str) -> ChatResponse:
        """Answer a user message within a session.

        Args:
            session_id: Existing session id
            message: The user's message text

        Returns:
            ChatResponse with the stored assistant message, every ranked
            source, and the stored user message

        Raises:
            InvalidRequestError: Blank session id or non-string message
            SessionNotFoundError: Unknown session id
            RetrievalError: Candidate gathering, ranking or citing failed
            CompositionError: The composer failed
            PersistenceError: A message could not be stored
        """
        self._stage(QueryStage.RECEIVED, session_id)
        self._validate(session_id)
        if not isinstance(message, str):
            raise InvalidRequestError("message must be a string")

        timestamp = self.clock()
        user_message = self._persist(session_id, "user", message, None, timestamp)
        self._stage(QueryStage.USER_MSG_PERSISTED, session_id)

        stage = QueryStage.CANDIDATES_GATHERED
        try:
            candidates = self.matcher.match(message)
            self._stage(stage, session_id)

            stage = QueryStage.RANKED
            results = self.ranker.rank(message, candidates)
            self._stage(stage, session_id)

            stage = QueryStage.CITED
            citations = self.citation_builder.build(results)
            self._stage(stage, session_id)
        except Exception as e:
            raise RetrievalError(
                f"Retrieval failed at {stage.value} for session {session_id}: {e}",
                stage=stage.value,
            ) from e

        try:
            content = self.composer.compose(message, results, citations)
        except Exception as e:
            raise CompositionError(f"Failed to compose response: {e}") from e
        self._stage(QueryStage.COMPOSED, session_id)

        assistant_message = self._persist(
            session_id,
            "assistant",
            content,
            citations or None,
            timestamp,
            user_message_id=user_message.id,
        )
        self._stage(QueryStage.ASSISTANT_MSG_PERSISTED, session_id)

        logger.info(
            "Session %s: answered with %d sources, %d citations",
            session_id,
            len(results),
            len(citations),
        )
        self._stage(QueryStage.RETURNED, session_id)
        return ChatResponse(
            message=assistant_message, sources=results, user_message=user_message
        )

    async def aprocess_query(self, session_id: str, message: str) -> ChatResponse:
        """Async variant of process_query; runs the pipeline in a worker thread."""
        return await asyncio.to_thread(self.process_query, session_id, message)
