"""Practice session entities for the interview practice engine."""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    """Session status enum."""
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


class SessionKind(str, Enum):
    """Kind of practice attempt."""
    SINGLE_QUESTION = "SingleQuestion"
    MOCK_INTERVIEW = "MockInterview"


class AnswerFeedback(BaseModel):
    """Structured feedback for one answer."""

    overall: str
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class SessionAnswer(BaseModel):
    """One question slot within a session.

    The slot only references its question by id; question content is
    attached on read through the session view.
    """

    id: UUID = Field(default_factory=uuid.uuid4)
    session_id: UUID
    question_id: int
    ordinal: int = Field(ge=1)
    answer_text: Optional[str] = None
    answered_at: Optional[datetime] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)
    feedback: Optional[AnswerFeedback] = None

    @property
    def is_answered(self) -> bool:
        return self.answer_text is not None

    @property
    def is_scored(self) -> bool:
        return self.score is not None


class PracticeSession(BaseModel):
    """Session entity representing one practice attempt.

    A session and its answers form one aggregate and are always
    persisted together. ``version`` counts stored writes; the repository
    only accepts an update made against the version it currently holds.
    """

    id: UUID = Field(default_factory=uuid.uuid4)
    caller_id: str
    kind: SessionKind
    status: SessionStatus = SessionStatus.IN_PROGRESS
    number_of_questions: int = Field(ge=1)
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    overall_score: Optional[Decimal] = Field(default=None, ge=0, le=100)
    answers: list[SessionAnswer] = Field(default_factory=list)
    version: int = Field(default=0, ge=0)

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "id": "8d3c9a52-6f0e-4c1b-9a57-2b1f0f6d8e10",
                "caller_id": "user-123",
                "kind": "MockInterview",
                "status": "InProgress",
                "number_of_questions": 3,
                "answers": [],
            }
        }

    @classmethod
    def open(
        cls,
        caller_id: str,
        kind: SessionKind,
        question_ids: list[int],
        started_at: Optional[datetime] = None,
    ) -> "PracticeSession":
        """Create an in-progress session with one answer slot per question.

        Ordinals are allocated 1..N in the order the question ids are given.
        """
        if not question_ids:
            raise ValueError("A session needs at least one question")
        if len(set(question_ids)) != len(question_ids):
            raise ValueError("A session cannot contain the same question twice")

        session = cls(
            caller_id=caller_id,
            kind=kind,
            number_of_questions=len(question_ids),
            started_at=started_at or utc_now(),
        )
        session.answers = [
            SessionAnswer(session_id=session.id, question_id=question_id, ordinal=ordinal)
            for ordinal, question_id in enumerate(question_ids, start=1)
        ]
        return session

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def question_ids(self) -> list[int]:
        return [answer.question_id for answer in self.ordered_answers()]

    def ordered_answers(self) -> list[SessionAnswer]:
        return sorted(self.answers, key=lambda answer: answer.ordinal)

    def find_answer(self, question_id: int) -> Optional[SessionAnswer]:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None

    def scored_average(self) -> Optional[Decimal]:
        """Mean score over scored answers; unanswered slots are left out."""
        scores = [answer.score for answer in self.answers if answer.score is not None]
        if not scores:
            return None
        mean = Decimal(sum(scores)) / Decimal(len(scores))
        return mean.quantize(Decimal("0.01"))

    def mark_completed(self, overall_score: Optional[Decimal], completed_at: Optional[datetime] = None) -> None:
        if self.is_completed:
            raise ValueError(f"Session {self.id} is already completed")
        self.status = SessionStatus.COMPLETED
        self.completed_at = completed_at or utc_now()
        self.overall_score = overall_score
