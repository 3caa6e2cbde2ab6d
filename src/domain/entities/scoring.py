"""Scoring entities exchanged with the external scoring provider."""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .practice_session import AnswerFeedback, SessionStatus


class ScoringResult(BaseModel):
    """Validated response of a scoring provider.

    The score must be a real integer; floats, numeric strings and missing
    values are rejected.
    """

    model_config = ConfigDict(extra="ignore")

    score: StrictInt = Field(ge=0, le=100)
    feedback: AnswerFeedback


FALLBACK_FEEDBACK = AnswerFeedback(
    overall="Your answer could not be analyzed automatically. Please try again later.",
    strengths=[],
    improvements=["Automated review was unavailable; your answer has been saved."],
)

FALLBACK_RESULT = ScoringResult(score=0, feedback=FALLBACK_FEEDBACK)


class SubmissionResult(BaseModel):
    """Outcome of one answer submission."""

    session_id: UUID
    answer_id: UUID
    question_id: int
    ordinal: int
    score: int
    feedback: AnswerFeedback
    session_status: SessionStatus
    overall_score: Optional[Decimal] = None
    scored_by_fallback: bool = False
