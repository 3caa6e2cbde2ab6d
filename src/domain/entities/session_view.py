"""Hydrated read model of a session with question snapshots attached."""
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .practice_session import AnswerFeedback, PracticeSession, SessionKind, SessionStatus
from .question import Category, Difficulty, Question, Tag


class QuestionSnapshot(BaseModel):
    """Question content as presented to the caller."""

    id: int
    content: str
    sample_answer: Optional[str] = None
    difficulty: Difficulty
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)

    @classmethod
    def from_question(cls, question: Question) -> "QuestionSnapshot":
        return cls(
            id=question.id,
            content=question.content,
            sample_answer=question.sample_answer,
            difficulty=question.difficulty,
            categories=list(question.categories),
            tags=list(question.tags),
        )


class AnswerView(BaseModel):
    id: UUID
    ordinal: int
    question: Optional[QuestionSnapshot] = None
    answer_text: Optional[str] = None
    answered_at: Optional[datetime] = None
    score: Optional[int] = None
    feedback: Optional[AnswerFeedback] = None


class SessionView(BaseModel):
    """A session with every answer slot and its question snapshot."""

    id: UUID
    caller_id: str
    kind: SessionKind
    status: SessionStatus
    number_of_questions: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    overall_score: Optional[Decimal] = None
    answers: list[AnswerView] = Field(default_factory=list)

    @classmethod
    def hydrate(cls, session: PracticeSession, questions: Mapping[int, Question]) -> "SessionView":
        """Attach question snapshots to a session.

        Questions missing from ``questions`` (e.g. removed from the catalog)
        leave the snapshot empty rather than failing the read.
        """
        answers = []
        for answer in session.ordered_answers():
            question = questions.get(answer.question_id)
            answers.append(
                AnswerView(
                    id=answer.id,
                    ordinal=answer.ordinal,
                    question=QuestionSnapshot.from_question(question) if question else None,
                    answer_text=answer.answer_text,
                    answered_at=answer.answered_at,
                    score=answer.score,
                    feedback=answer.feedback,
                )
            )

        return cls(
            id=session.id,
            caller_id=session.caller_id,
            kind=session.kind,
            status=session.status,
            number_of_questions=session.number_of_questions,
            started_at=session.started_at,
            completed_at=session.completed_at,
            overall_score=session.overall_score,
            answers=answers,
        )
