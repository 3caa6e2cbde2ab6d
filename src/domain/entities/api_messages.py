"""HTTP request and response models for the practice API."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .practice_session import AnswerFeedback, PracticeSession, SessionKind, SessionStatus
from .scoring import SubmissionResult
from .usage import ActionType, QuotaDecision


# ===== Client → Server =====


class StartSingleQuestionRequest(BaseModel):
    """Start practising one named question."""

    question_id: int


class SubmitSingleAnswerRequest(BaseModel):
    """Answer for a single-question session."""

    answer: str = Field(min_length=1)


class StartMockInterviewRequest(BaseModel):
    """Start a multi-question mock interview."""

    category_ids: list[int] = Field(default_factory=list)
    difficulty_levels: list[str] = Field(default_factory=list)
    number_of_questions: int = Field(ge=1, le=10)


class SubmitMockAnswerRequest(BaseModel):
    """Answer for one question of a mock interview."""

    question_id: int
    answer: str = Field(min_length=1)


# ===== Server → Client =====


class SubmitAnswerResponse(BaseModel):
    """Score and feedback for a submitted answer."""

    session_id: UUID
    answer_id: UUID
    question_id: int
    ordinal: int
    score: int
    feedback: AnswerFeedback
    session_status: SessionStatus
    overall_score: Optional[Decimal] = None

    @classmethod
    def from_result(cls, result: SubmissionResult) -> "SubmitAnswerResponse":
        return cls(**result.model_dump(exclude={"scored_by_fallback"}))


class SessionSummary(BaseModel):
    """One row of the caller's practice history."""

    id: UUID
    kind: SessionKind
    status: SessionStatus
    number_of_questions: int
    answered_questions: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    overall_score: Optional[Decimal] = None

    @classmethod
    def from_session(cls, session: PracticeSession) -> "SessionSummary":
        return cls(
            id=session.id,
            kind=session.kind,
            status=session.status,
            number_of_questions=session.number_of_questions,
            answered_questions=sum(1 for answer in session.answers if answer.is_answered),
            started_at=session.started_at,
            completed_at=session.completed_at,
            overall_score=session.overall_score,
        )


class QuotaStatus(BaseModel):
    """Remaining daily quota for one action."""

    action_type: ActionType
    unlimited: bool
    limit: Optional[int] = None
    used: Optional[int] = None
    remaining: Optional[int] = None

    @classmethod
    def from_decision(cls, decision: QuotaDecision) -> "QuotaStatus":
        return cls(
            action_type=decision.action_type,
            unlimited=decision.unlimited,
            limit=decision.limit,
            used=decision.used,
            remaining=decision.remaining,
        )


class ErrorCode(str, Enum):
    """Error codes returned to API callers."""

    AUTH_FAILED = "AUTH_FAILED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    QUESTION_NOT_FOUND = "QUESTION_NOT_FOUND"
    ANSWER_NOT_FOUND = "ANSWER_NOT_FOUND"
    INSUFFICIENT_POOL = "INSUFFICIENT_POOL"
    INVALID_REQUEST = "INVALID_REQUEST"
    SESSION_STATE_CONFLICT = "SESSION_STATE_CONFLICT"
    SCORING_UNAVAILABLE = "SCORING_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorMessage(BaseModel):
    """Error body returned by the API."""

    code: ErrorCode
    message: str
    details: dict = Field(default_factory=dict)
