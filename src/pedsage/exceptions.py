# src/pedsage/exceptions.py
"""Exceptions raised by pedsage.

Validation errors are raised before anything is persisted. Retrieval and
persistence errors always chain the underlying cause.
"""


class PedSageError(Exception):
    """Base class for all pedsage errors."""


class InvalidRequestError(PedSageError, ValueError):
    """Raised when a query request is malformed (e.g. blank session id)."""


class SessionNotFoundError(PedSageError, LookupError):
    """Raised when a session id does not resolve to a stored session."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Chat session with id {session_id} not found")
        self.session_id = session_id


class RetrievalError(PedSageError):
    """Raised when candidate gathering or ranking fails for a query.

    Attributes:
        stage: Pipeline stage that failed.
    """

    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class PersistenceError(PedSageError):
    """Raised when a chat message could not be durably recorded.

    Attributes:
        role: Role of the message whose write failed.
        user_message_id: Id of the already-stored user message, if any.
    """

    def __init__(self, message: str, role: str, user_message_id: str | None = None) -> None:
        super().__init__(message)
        self.role = role
        self.user_message_id = user_message_id


class CitationError(PedSageError):
    """Raised when a citation would reference an entry missing from the corpus."""


class DuplicateEntryError(PedSageError, ValueError):
    """Raised when an entry id is already used by an entry of the other kind."""


class EmbeddingDimensionError(PedSageError, ValueError):
    """Raised when embeddings break the fixed-dimension, all-or-nothing rule."""


class CompositionError(PedSageError):
    """Raised when the response composer fails to produce text."""
