"""Domain errors raised by the practice engine.

Each error carries the API error code and the HTTP status it maps to so
the application layer can render it without knowing the concrete type.
"""

from typing import Any, Optional
from uuid import UUID

from .entities.api_messages import ErrorCode
from .entities.usage import ActionType


class PracticeError(Exception):
    """Base class for caller-visible practice errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def details(self) -> dict[str, Any]:
        return {}


class AuthenticationError(PracticeError):
    """Caller identity missing, invalid, or unknown."""

    code = ErrorCode.AUTH_FAILED
    status_code = 401


class QuotaExceededError(PracticeError):
    """Free-tier daily limit reached for an action."""

    code = ErrorCode.QUOTA_EXCEEDED
    status_code = 403

    def __init__(self, message: str, action_type: ActionType, limit: int, used: int):
        super().__init__(message)
        self.action_type = action_type
        self.limit = limit
        self.used = used

    @property
    def details(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "limit": self.limit,
            "used": self.used,
            "remaining": max(self.limit - self.used, 0),
        }


class NotFoundError(PracticeError, ValueError):
    """An entity the caller referenced does not exist."""

    code = ErrorCode.SESSION_NOT_FOUND
    status_code = 404


class SessionNotFoundError(NotFoundError):
    code = ErrorCode.SESSION_NOT_FOUND

    def __init__(self, session_id: Any):
        super().__init__(f"Session with id {session_id} not found")
        self.session_id = session_id


class QuestionNotFoundError(NotFoundError):
    code = ErrorCode.QUESTION_NOT_FOUND

    def __init__(self, question_id: int, message: Optional[str] = None):
        super().__init__(message or f"Question with id {question_id} not found")
        self.question_id = question_id


class AnswerSlotNotFoundError(NotFoundError):
    code = ErrorCode.ANSWER_NOT_FOUND

    def __init__(self, session_id: UUID, question_id: Optional[int]):
        super().__init__(f"Question {question_id} is not part of session {session_id}")
        self.session_id = session_id
        self.question_id = question_id


class InsufficientPoolError(PracticeError):
    """Fewer eligible questions than requested."""

    code = ErrorCode.INSUFFICIENT_POOL
    status_code = 422

    def __init__(self, requested: int, available: int):
        super().__init__(
            "Could not find enough questions matching your criteria. "
            "Please try a broader selection."
        )
        self.requested = requested
        self.available = available

    @property
    def details(self) -> dict[str, Any]:
        return {"requested": self.requested, "available": self.available}


class InvalidRequestError(PracticeError):
    code = ErrorCode.INVALID_REQUEST
    status_code = 400


class SessionStateError(PracticeError):
    """Operation not allowed in the session's current state."""

    code = ErrorCode.SESSION_STATE_CONFLICT
    status_code = 409


class ConcurrentModificationError(SessionStateError):
    """The session was written by someone else since it was read."""

    def __init__(self, session_id: Any):
        super().__init__(f"Session {session_id} was modified concurrently; reload and retry")
        self.session_id = session_id


class ScoringProviderError(Exception):
    """Transport, timeout or schema failure of the scoring provider.

    Never surfaced to callers; the scoring coordinator falls back instead.
    """
