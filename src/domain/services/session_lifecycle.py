"""Practice session lifecycle: creation, completion and hydrated reads."""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from ..entities.practice_session import PracticeSession, SessionKind, utc_now
from ..entities.question import QuestionFilter
from ..entities.session_view import SessionView
from ..entities.subscriber import Subscriber
from ..entities.usage import ActionType
from ..errors import SessionStateError
from ..interfaces.question_catalog import QuestionCatalog
from ..interfaces.session_repository import SessionRepository
from ..interfaces.subscriber_directory import SubscriberDirectory
from .answer_scoring import AnswerScoringCoordinator
from .question_selector import QuestionSelector
from .quota_gate import QuotaGate
from .session_access import load_owned_session, require_caller
from .session_locks import SessionLocks

logger = logging.getLogger(__name__)


class SessionLifecycleManager:
    """
    Owns the session state machine: InProgress -> Completed.

    This service owns:
    - Caller resolution and the quota check before any session is created
    - Building sessions with contiguous answer ordinals 1..N
    - Explicit completion of mock interviews and score aggregation
    - Hydrating sessions with question snapshots for callers

    Completion and submission for the same session are serialized through
    the lock registry shared with the scoring coordinator.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        question_catalog: QuestionCatalog,
        subscriber_directory: SubscriberDirectory,
        quota_gate: QuotaGate,
        question_selector: QuestionSelector,
        scoring_coordinator: AnswerScoringCoordinator,
        session_locks: Optional[SessionLocks] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session_repository = session_repository
        self.question_catalog = question_catalog
        self.subscriber_directory = subscriber_directory
        self.quota_gate = quota_gate
        self.question_selector = question_selector
        self.scoring_coordinator = scoring_coordinator
        self.session_locks = session_locks or scoring_coordinator.session_locks
        self.clock = clock

    def resolve_subscriber(self, caller_id: str) -> Subscriber:
        """Resolve the caller account and tier.

        Raises:
            AuthenticationError: If the caller is missing or has no account.
        """
        return self.subscriber_directory.get_subscriber(require_caller(caller_id))

    async def start_single_question(self, caller_id: str, question_id: int) -> SessionView:
        """
        Start practising one named question.

        Raises:
            AuthenticationError: Unknown caller.
            QuotaExceededError: Daily single-question limit reached.
            QuestionNotFoundError: Question missing or inactive.
        """
        subscriber = self.resolve_subscriber(caller_id)
        await self.quota_gate.ensure_allowed(subscriber, ActionType.COMPLETE_SINGLE_QUESTION)

        question = self.question_selector.select_by_id(question_id)

        session = PracticeSession.open(
            caller_id=subscriber.id,
            kind=SessionKind.SINGLE_QUESTION,
            question_ids=[question.id],
            started_at=self.clock(),
        )
        await self.session_repository.save_session(session)
        logger.info(f"Created single-question session {session.id} for caller {subscriber.id} (question {question.id})")

        return SessionView.hydrate(session, {question.id: question})

    async def start_mock_interview(
        self,
        caller_id: str,
        question_filter: QuestionFilter,
        count: int,
    ) -> SessionView:
        """
        Start a mock interview over ``count`` randomly sampled questions.

        Raises:
            AuthenticationError: Unknown caller.
            QuotaExceededError: Daily mock-interview limit reached.
            InsufficientPoolError: Not enough questions match the filter.
        """
        subscriber = self.resolve_subscriber(caller_id)
        await self.quota_gate.ensure_allowed(subscriber, ActionType.COMPLETE_FULL_MOCK_INTERVIEW)

        active_filter = question_filter.model_copy(update={"active_only": True})
        questions = self.question_selector.select(active_filter, count)

        session = PracticeSession.open(
            caller_id=subscriber.id,
            kind=SessionKind.MOCK_INTERVIEW,
            question_ids=[question.id for question in questions],
            started_at=self.clock(),
        )
        await self.session_repository.save_session(session)
        logger.info(
            f"Created mock interview {session.id} for caller {subscriber.id} "
            f"with {session.number_of_questions} questions"
        )

        return SessionView.hydrate(session, {question.id: question for question in questions})

    async def complete(self, session_id: UUID, caller_id: str) -> SessionView:
        """
        Complete a mock interview and aggregate its score.

        The overall score is the mean of the scored answers; unanswered
        slots are left out. Exactly one usage event is written.

        Raises:
            SessionNotFoundError: Unknown session or owned by another caller.
            SessionStateError: Session already completed, single-question, or
                written by another worker since it was loaded.
        """
        async with self.session_locks.hold(session_id):
            session = await load_owned_session(self.session_repository, session_id, caller_id)

            if session.kind != SessionKind.MOCK_INTERVIEW:
                raise SessionStateError(
                    f"Session {session_id} is a single-question session and completes on submission"
                )
            if session.is_completed:
                logger.warning(f"Rejected repeated completion of session {session_id} by caller {caller_id}")
                raise SessionStateError(f"Session {session_id} is already completed")

            session.mark_completed(session.scored_average(), completed_at=self.clock())
            await self.scoring_coordinator.record_completion(session, ActionType.COMPLETE_FULL_MOCK_INTERVIEW)
            logger.info(
                f"Mock interview {session_id} completed for caller {caller_id} "
                f"with overall score {session.overall_score}"
            )

        return self.hydrate(session)

    async def get_session(self, session_id: UUID, caller_id: str) -> SessionView:
        session = await load_owned_session(self.session_repository, session_id, caller_id)
        return self.hydrate(session)

    async def list_sessions(self, caller_id: str) -> list[PracticeSession]:
        """The caller's practice history, newest first."""
        sessions = await self.session_repository.list_sessions(require_caller(caller_id))
        return sorted(sessions, key=lambda session: session.started_at, reverse=True)

    def hydrate(self, session: PracticeSession) -> SessionView:
        """Attach question snapshots to every answer slot of a session."""
        questions = self.question_catalog.get_questions(session.question_ids)
        return SessionView.hydrate(session, questions)
