"""Answer submission and scoring coordination."""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

from pydantic import BaseModel, ValidationError

from ..entities.practice_session import PracticeSession, SessionAnswer, SessionKind, utc_now
from ..entities.question import Question
from ..entities.scoring import FALLBACK_RESULT, ScoringResult, SubmissionResult
from ..entities.usage import ActionType, UsageEvent
from ..errors import AnswerSlotNotFoundError, InvalidRequestError, ScoringProviderError, SessionStateError
from ..interfaces.question_catalog import QuestionCatalog
from ..interfaces.scoring_provider import ScoringProvider
from ..interfaces.session_repository import SessionRepository
from ..interfaces.usage_ledger import UsageLedger
from .session_access import load_owned_session
from .session_locks import SessionLocks

logger = logging.getLogger(__name__)


class AnswerScoringCoordinator:
    """
    Submits answers, scores them through the external provider and
    records usage when a session reaches its terminal state.

    The submitted text is persisted before the provider is called, and any
    provider fault (timeout, transport error, malformed payload) is replaced
    by a fixed fallback result with score 0. A submission therefore always
    succeeds once the answer slot is found, whatever the provider does.

    Single-question sessions complete as part of their one submission.
    Mock-interview sessions only complete through an explicit call on the
    lifecycle manager, which uses ``record_completion`` from here.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        question_catalog: QuestionCatalog,
        usage_ledger: UsageLedger,
        scoring_provider: ScoringProvider,
        session_locks: Optional[SessionLocks] = None,
        scoring_timeout: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session_repository = session_repository
        self.question_catalog = question_catalog
        self.usage_ledger = usage_ledger
        self.scoring_provider = scoring_provider
        self.session_locks = session_locks or SessionLocks()
        self.scoring_timeout = scoring_timeout
        self.clock = clock

    async def submit(
        self,
        session_id: UUID,
        caller_id: str,
        answer_text: str,
        question_id: Optional[int] = None,
    ) -> SubmissionResult:
        """
        Submit one answer and return its score and feedback.

        Args:
            session_id: The session being answered.
            caller_id: The caller; must own the session.
            answer_text: The caller's answer.
            question_id: Required for mock interviews. For single-question
                sessions it may be omitted; if given it must match.

        Raises:
            SessionNotFoundError: Unknown session or owned by another caller.
            AnswerSlotNotFoundError: The question is not part of the session.
            InvalidRequestError: Mock-interview submission without a question id.
            SessionStateError: The session is already completed, or another
                worker wrote it while this submission was in flight.
        """
        async with self.session_locks.hold(session_id):
            session = await load_owned_session(self.session_repository, session_id, caller_id)
            if session.is_completed:
                logger.warning(f"Rejected submission to completed session {session_id} by caller {caller_id}")
                raise SessionStateError(f"Session {session_id} is already completed")

            answer = self._locate_answer(session, question_id)

            if answer.is_scored:
                logger.info(f"Overwriting scored answer #{answer.ordinal} of session {session_id}")

            answer.answer_text = answer_text
            answer.answered_at = self.clock()
            answer.score = None
            answer.feedback = None
            await self.session_repository.update_session(session)
            logger.info(f"Stored answer #{answer.ordinal} for session {session_id} (caller {caller_id})")

            question = self.question_catalog.get_question(answer.question_id)

            result, degraded = await self._score(session, answer, question)
            answer.score = result.score
            answer.feedback = result.feedback.model_copy(deep=True)

            if session.kind == SessionKind.SINGLE_QUESTION:
                session.mark_completed(Decimal(result.score), completed_at=self.clock())
                await self.record_completion(session, ActionType.COMPLETE_SINGLE_QUESTION)
                logger.info(f"Single-question session {session_id} completed with score {result.score}")
            else:
                await self.session_repository.update_session(session)

            logger.info(
                f"Scored answer #{answer.ordinal} of session {session_id}: {result.score}"
                f"{' (fallback)' if degraded else ''}"
            )

            return SubmissionResult(
                session_id=session.id,
                answer_id=answer.id,
                question_id=answer.question_id,
                ordinal=answer.ordinal,
                score=result.score,
                feedback=answer.feedback,
                session_status=session.status,
                overall_score=session.overall_score,
                scored_by_fallback=degraded,
            )

    async def record_completion(self, session: PracticeSession, action_type: ActionType) -> UsageEvent:
        """Persist a session that has just been marked completed.

        Writes the usage event first, then the completed session, then the
        question usage counters. The ledger drops a second event for the
        same session, so a completion retried after a failed session write
        is charged once. If the ledger write fails the session stays
        ``InProgress`` in the repository and the completion can be retried.

        Raises:
            ConcurrentModificationError: If another writer saved the session
                since it was loaded.
        """
        event = UsageEvent(
            caller_id=session.caller_id,
            action_type=action_type,
            occurred_at=session.completed_at or self.clock(),
            session_id=session.id,
        )
        if await self.usage_ledger.record_event(event):
            logger.info(f"Recorded {action_type.value} usage for caller {session.caller_id} (session {session.id})")

        await self.session_repository.update_session(session)

        # Best effort: counters are catalog statistics.
        try:
            self.question_catalog.increment_usage(session.question_ids)
        except Exception as e:
            logger.error(
                f"Failed to increment usage counters for session {session.id}: {e}",
                exc_info=True,
            )
        return event

    def _locate_answer(self, session: PracticeSession, question_id: Optional[int]) -> SessionAnswer:
        if session.kind == SessionKind.SINGLE_QUESTION:
            answer = session.ordered_answers()[0] if session.answers else None
            if answer is None or (question_id is not None and answer.question_id != question_id):
                raise AnswerSlotNotFoundError(session.id, question_id)
            return answer

        if question_id is None:
            raise InvalidRequestError("question_id is required when answering a mock interview")
        answer = session.find_answer(question_id)
        if answer is None:
            logger.warning(f"Question {question_id} is not part of session {session.id}")
            raise AnswerSlotNotFoundError(session.id, question_id)
        return answer

    async def _score(
        self,
        session: PracticeSession,
        answer: SessionAnswer,
        question: Question,
    ) -> tuple[ScoringResult, bool]:
        """Call the scoring provider, returning (result, used_fallback)."""
        try:
            raw = await asyncio.wait_for(
                self.scoring_provider.score(question.content, answer.answer_text or ""),
                timeout=self.scoring_timeout,
            )
            return self._validated(raw), False
        except asyncio.TimeoutError:
            logger.error(
                f"Scoring timed out after {self.scoring_timeout}s for session {session.id} "
                f"answer #{answer.ordinal}; using fallback"
            )
        except (ScoringProviderError, ValidationError) as e:
            logger.error(
                f"Scoring provider fault for session {session.id} answer #{answer.ordinal}: {e}; using fallback"
            )
        except Exception as e:
            logger.error(
                f"Unexpected scoring error for session {session.id} answer #{answer.ordinal}: {e}",
                exc_info=True,
            )
        return FALLBACK_RESULT, True

    @staticmethod
    def _validated(raw: object) -> ScoringResult:
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        return ScoringResult.model_validate(raw)
