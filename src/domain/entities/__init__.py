"""Domain entities for the interview practice engine."""

from .api_messages import (
    ErrorCode,
    ErrorMessage,
    QuotaStatus,
    SessionSummary,
    StartMockInterviewRequest,
    StartSingleQuestionRequest,
    SubmitAnswerResponse,
    SubmitMockAnswerRequest,
    SubmitSingleAnswerRequest,
)
from .practice_session import (
    AnswerFeedback,
    PracticeSession,
    SessionAnswer,
    SessionKind,
    SessionStatus,
    utc_now,
)
from .question import Category, Difficulty, Question, QuestionFilter, Tag
from .scoring import FALLBACK_FEEDBACK, FALLBACK_RESULT, ScoringResult, SubmissionResult
from .session_view import AnswerView, QuestionSnapshot, SessionView
from .subscriber import Subscriber, SubscriptionTier
from .usage import ActionType, QuotaDecision, UsageEvent

__all__ = [
    # Session entities
    "PracticeSession",
    "SessionAnswer",
    "SessionKind",
    "SessionStatus",
    "AnswerFeedback",
    "utc_now",
    # Session views
    "SessionView",
    "AnswerView",
    "QuestionSnapshot",
    # Question entities
    "Question",
    "QuestionFilter",
    "Difficulty",
    "Category",
    "Tag",
    # Subscriber entities
    "Subscriber",
    "SubscriptionTier",
    # Usage entities
    "ActionType",
    "UsageEvent",
    "QuotaDecision",
    # Scoring entities
    "ScoringResult",
    "SubmissionResult",
    "FALLBACK_FEEDBACK",
    "FALLBACK_RESULT",
    # API messages
    "StartSingleQuestionRequest",
    "SubmitSingleAnswerRequest",
    "StartMockInterviewRequest",
    "SubmitMockAnswerRequest",
    "SubmitAnswerResponse",
    "SessionSummary",
    "QuotaStatus",
    "ErrorCode",
    "ErrorMessage",
]
