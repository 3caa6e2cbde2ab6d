"""Tests for the session lifecycle manager."""

import asyncio
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from src.domain.entities.practice_session import AnswerFeedback, SessionKind, SessionStatus
from src.domain.entities.question import Category, Difficulty, Question, QuestionFilter
from src.domain.entities.scoring import ScoringResult, SubmissionResult
from src.domain.entities.session_view import SessionView
from src.domain.entities.subscriber import Subscriber, SubscriptionTier
from src.domain.entities.usage import ActionType
from src.domain.errors import (
    AuthenticationError,
    ConcurrentModificationError,
    InsufficientPoolError,
    QuestionNotFoundError,
    QuotaExceededError,
    SessionNotFoundError,
    SessionStateError,
)
from src.domain.services import (
    AnswerScoringCoordinator,
    QuestionSelector,
    QuotaGate,
    SessionLifecycleManager,
    SessionLocks,
)
from src.infrastructure.local_question_catalog import LocalQuestionCatalog
from src.infrastructure.local_session_repository import LocalSessionRepository
from src.infrastructure.local_settings_provider import LocalSettingsProvider
from src.infrastructure.local_subscriber_directory import LocalSubscriberDirectory
from src.infrastructure.local_usage_ledger import LocalUsageLedger

NOW = datetime(2026, 2, 10, 15, 30, tzinfo=timezone.utc)


class QueuedScoringProvider:
    """Returns the queued scores in order."""

    def __init__(self, *scores):
        self.scores = list(scores)

    async def score(self, question, answer):
        return ScoringResult(score=self.scores.pop(0), feedback=AnswerFeedback(overall="ok"))


class Engine:
    """Lifecycle manager and coordinator wired over local collaborators."""

    def __init__(self, scores=(), questions=None, repository=None, ledger=None):
        self.repository = repository or LocalSessionRepository()
        self.ledger = ledger or LocalUsageLedger()
        self.catalog = LocalQuestionCatalog(questions)
        self.directory = LocalSubscriberDirectory(seed_demo_accounts=False)
        self.directory.add_subscriber(Subscriber(id="free-user", tier=SubscriptionTier.FREE))
        self.directory.add_subscriber(Subscriber(id="paid-user", tier=SubscriptionTier.PREMIUM))
        self.directory.add_subscriber(Subscriber(id="other-user", tier=SubscriptionTier.FREE))
        self.settings = LocalSettingsProvider()
        self.clock_value = NOW
        self.scores = list(scores)

        self.coordinator, self.lifecycle = self.worker()

    def worker(self):
        """Build a coordinator and lifecycle manager pair with its own session locks.

        Each pair stands for one process; pairs share storage but not locks.
        """
        locks = SessionLocks()
        coordinator = AnswerScoringCoordinator(
            session_repository=self.repository,
            question_catalog=self.catalog,
            usage_ledger=self.ledger,
            scoring_provider=QueuedScoringProvider(*self.scores),
            session_locks=locks,
            clock=self.clock,
        )
        lifecycle = SessionLifecycleManager(
            session_repository=self.repository,
            question_catalog=self.catalog,
            subscriber_directory=self.directory,
            quota_gate=QuotaGate(self.ledger, self.settings, clock=self.clock),
            question_selector=QuestionSelector(self.catalog, rng=random.Random(7)),
            scoring_coordinator=coordinator,
            session_locks=locks,
            clock=self.clock,
        )
        return coordinator, lifecycle

    def clock(self):
        return self.clock_value


class YieldingSessionRepository(LocalSessionRepository):
    """Local repository that yields to the event loop after every read, like a network store."""

    async def get_session(self, session_id):
        session = await super().get_session(session_id)
        await asyncio.sleep(0)
        return session


def question_bank():
    behavioral = Category(id=1, name="Behavioral")
    design = Category(id=2, name="System Design")
    return [
        Question(id=42, content="Tell me about a conflict.", difficulty=Difficulty.MEDIUM, categories=[behavioral]),
        Question(id=1, content="Easy behavioral", difficulty=Difficulty.EASY, categories=[behavioral]),
        Question(id=2, content="Hard design", difficulty=Difficulty.HARD, categories=[design]),
        Question(id=3, content="Medium design", difficulty=Difficulty.MEDIUM, categories=[design]),
        Question(id=4, content="Medium behavioral", difficulty=Difficulty.MEDIUM, categories=[behavioral]),
        Question(id=5, content="Retired", difficulty=Difficulty.EASY, categories=[design], is_active=False),
    ]


@pytest.fixture
def engine():
    return Engine(scores=[80, 65, 90, 70, 30, 50, 60, 20, 10, 40], questions=question_bank())


class TestStartSingleQuestion:
    """Starting single-question sessions."""

    @pytest.mark.asyncio
    async def test_start_single_question(self, engine):
        """Test a fresh free caller gets one slot at ordinal 1 bound to the question."""
        view = await engine.lifecycle.start_single_question("free-user", 42)

        assert view.kind == SessionKind.SINGLE_QUESTION
        assert view.status == SessionStatus.IN_PROGRESS
        assert view.number_of_questions == 1
        assert len(view.answers) == 1
        assert view.answers[0].ordinal == 1
        assert view.answers[0].question.id == 42
        assert view.answers[0].question.content == "Tell me about a conflict."
        assert view.started_at == NOW

        stored = await engine.repository.get_session(view.id)
        assert stored.caller_id == "free-user"

    @pytest.mark.asyncio
    async def test_unknown_caller(self, engine):
        """Test that a caller without an account cannot start a session."""
        with pytest.raises(AuthenticationError):
            await engine.lifecycle.start_single_question("ghost", 42)
        assert len(engine.repository) == 0

    @pytest.mark.asyncio
    async def test_missing_caller(self, engine):
        """Test that an empty caller id is an authentication failure."""
        with pytest.raises(AuthenticationError, match="not authenticated"):
            await engine.lifecycle.start_single_question("", 42)

    @pytest.mark.asyncio
    async def test_inactive_question(self, engine):
        """Test that an inactive question cannot be practised."""
        with pytest.raises(QuestionNotFoundError):
            await engine.lifecycle.start_single_question("free-user", 5)
        assert len(engine.repository) == 0

    @pytest.mark.asyncio
    async def test_quota_exceeded_after_limit_completions(self, engine):
        """Test that after L completions today the next start is denied and creates nothing."""
        engine.settings.set_value("FREE_USER_QUESTION_DAILY_LIMIT", 3)
        for _ in range(3):
            view = await engine.lifecycle.start_single_question("free-user", 42)
            await engine.coordinator.submit(view.id, "free-user", "answer")
        sessions_before = len(engine.repository)

        with pytest.raises(QuotaExceededError) as exc_info:
            await engine.lifecycle.start_single_question("free-user", 42)

        assert exc_info.value.limit == 3
        assert exc_info.value.action_type == ActionType.COMPLETE_SINGLE_QUESTION
        assert len(engine.repository) == sessions_before

    @pytest.mark.asyncio
    async def test_quota_resets_next_utc_day(self, engine):
        """Test that yesterday's completions do not count today."""
        engine.settings.set_value("FREE_USER_QUESTION_DAILY_LIMIT", 1)
        view = await engine.lifecycle.start_single_question("free-user", 42)
        await engine.coordinator.submit(view.id, "free-user", "answer")

        engine.clock_value = NOW + timedelta(days=1)
        view = await engine.lifecycle.start_single_question("free-user", 42)

        assert view.status == SessionStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_starting_without_completing_is_free(self, engine):
        """Test that abandoned sessions never consume quota."""
        for _ in range(8):
            await engine.lifecycle.start_single_question("free-user", 42)

        assert await engine.ledger.list_events("free-user") == []
        decision = await engine.lifecycle.quota_gate.check(
            engine.directory.get_subscriber("free-user"), ActionType.COMPLETE_SINGLE_QUESTION
        )
        assert decision.used == 0

    @pytest.mark.asyncio
    async def test_paid_caller_never_denied(self, engine):
        """Test that a paid caller can exceed the free limit."""
        engine.settings.set_value("FREE_USER_QUESTION_DAILY_LIMIT", 1)
        for _ in range(3):
            view = await engine.lifecycle.start_single_question("paid-user", 42)
            await engine.coordinator.submit(view.id, "paid-user", "answer")

        assert len(await engine.ledger.list_events("paid-user")) == 3


class TestStartMockInterview:
    """Starting mock interviews."""

    @pytest.mark.asyncio
    async def test_ordinals_are_contiguous(self, engine):
        """Test a k-question interview has ordinals 1..k over distinct questions."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 4)

        assert [answer.ordinal for answer in view.answers] == [1, 2, 3, 4]
        question_ids = [answer.question.id for answer in view.answers]
        assert len(set(question_ids)) == 4
        assert 5 not in question_ids
        assert view.kind == SessionKind.MOCK_INTERVIEW

    @pytest.mark.asyncio
    async def test_filters_apply(self, engine):
        """Test category and difficulty filters restrict the pool."""
        question_filter = QuestionFilter.from_request([2], ["hard", "medium"])

        view = await engine.lifecycle.start_mock_interview("free-user", question_filter, 2)

        assert {answer.question.id for answer in view.answers} == {2, 3}

    @pytest.mark.asyncio
    async def test_insufficient_pool_creates_nothing(self, engine):
        """Test that a pool of two matching questions cannot serve three."""
        question_filter = QuestionFilter.from_request([], ["Easy", "Hard"])

        with pytest.raises(InsufficientPoolError) as exc_info:
            await engine.lifecycle.start_mock_interview("free-user", question_filter, 3)

        assert exc_info.value.available == 2
        assert len(engine.repository) == 0

    @pytest.mark.asyncio
    async def test_mock_quota(self, engine):
        """Test the mock-interview limit counts completed interviews only."""
        for _ in range(2):
            view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 1)
            await engine.lifecycle.complete(view.id, "free-user")

        with pytest.raises(QuotaExceededError) as exc_info:
            await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 1)

        assert exc_info.value.limit == 2
        # Single-question practice has its own quota
        await engine.lifecycle.start_single_question("free-user", 42)


class TestCompleteMockInterview:
    """Completing mock interviews."""

    @pytest.mark.asyncio
    async def test_overall_is_mean_of_scored_answers(self, engine):
        """Test the overall score ignores unanswered slots."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 4)
        first, _, third, _ = [answer.question.id for answer in view.answers]
        await engine.coordinator.submit(view.id, "free-user", "a", question_id=first)
        await engine.coordinator.submit(view.id, "free-user", "b", question_id=third)

        completed = await engine.lifecycle.complete(view.id, "free-user")

        assert completed.status == SessionStatus.COMPLETED
        assert completed.overall_score == Decimal("72.50")
        assert completed.completed_at == NOW
        assert completed.answers[1].score is None

    @pytest.mark.asyncio
    async def test_completion_charges_once_and_counts_every_question(self, engine):
        """Test one usage event and one counter increment per question."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 3)
        question_ids = [answer.question.id for answer in view.answers]

        await engine.lifecycle.complete(view.id, "free-user")

        events = await engine.ledger.list_events("free-user")
        assert [event.action_type for event in events] == [ActionType.COMPLETE_FULL_MOCK_INTERVIEW]
        for question_id in question_ids:
            assert engine.catalog.get_question(question_id).usage_count == 1

    @pytest.mark.asyncio
    async def test_complete_without_answers(self, engine):
        """Test that an interview with no scored answers has no overall score."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 2)

        completed = await engine.lifecycle.complete(view.id, "free-user")

        assert completed.overall_score is None
        assert completed.status == SessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_complete_twice_rejected(self, engine):
        """Test that a second completion is rejected without a second charge."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 2)
        await engine.lifecycle.complete(view.id, "free-user")

        with pytest.raises(SessionStateError, match="already completed"):
            await engine.lifecycle.complete(view.id, "free-user")

        assert len(await engine.ledger.list_events("free-user")) == 1

    @pytest.mark.asyncio
    async def test_concurrent_completions_charge_once(self, engine):
        """Test that racing completions of one session write a single usage event."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 2)

        outcomes = await asyncio.gather(
            engine.lifecycle.complete(view.id, "free-user"),
            engine.lifecycle.complete(view.id, "free-user"),
            return_exceptions=True,
        )

        assert sum(isinstance(outcome, SessionStateError) for outcome in outcomes) == 1
        assert len(await engine.ledger.list_events("free-user")) == 1

    @pytest.mark.asyncio
    async def test_ledger_failure_leaves_interview_open(self, engine):
        """Test that a failed usage write keeps the interview in progress and a retry charges once."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 2)

        with patch.object(engine.ledger, "record_event", AsyncMock(side_effect=RuntimeError("ledger unavailable"))):
            with pytest.raises(RuntimeError, match="ledger unavailable"):
                await engine.lifecycle.complete(view.id, "free-user")

        stored = await engine.repository.get_session(view.id)
        assert stored.status == SessionStatus.IN_PROGRESS
        assert await engine.ledger.list_events("free-user") == []

        completed = await engine.lifecycle.complete(view.id, "free-user")

        assert completed.status == SessionStatus.COMPLETED
        assert len(await engine.ledger.list_events("free-user")) == 1

    @pytest.mark.asyncio
    async def test_completions_on_separate_workers_charge_once(self):
        """Test that two workers without a shared lock complete the session exactly once."""
        engine = Engine(questions=question_bank(), repository=YieldingSessionRepository())
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 2)
        question_ids = [answer.question.id for answer in view.answers]
        _, other_lifecycle = engine.worker()

        outcomes = await asyncio.gather(
            engine.lifecycle.complete(view.id, "free-user"),
            other_lifecycle.complete(view.id, "free-user"),
            return_exceptions=True,
        )

        assert sum(isinstance(outcome, SessionView) for outcome in outcomes) == 1
        assert sum(isinstance(outcome, ConcurrentModificationError) for outcome in outcomes) == 1
        events = await engine.ledger.list_events("free-user")
        assert len(events) == 1
        assert events[0].session_id == view.id
        for question_id in question_ids:
            assert engine.catalog.get_question(question_id).usage_count == 1
        assert (await engine.repository.get_session(view.id)).status == SessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_submissions_on_separate_workers_do_not_overwrite(self):
        """Test that a second worker's stale write is rejected instead of replacing the first."""
        engine = Engine(scores=[80, 65], questions=question_bank(), repository=YieldingSessionRepository())
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 2)
        first = view.answers[0].question.id
        other_coordinator, _ = engine.worker()

        outcomes = await asyncio.gather(
            engine.coordinator.submit(view.id, "free-user", "from worker one", question_id=first),
            other_coordinator.submit(view.id, "free-user", "from worker two", question_id=first),
            return_exceptions=True,
        )

        assert isinstance(outcomes[0], SubmissionResult)
        assert isinstance(outcomes[1], ConcurrentModificationError)
        stored = await engine.repository.get_session(view.id)
        assert stored.find_answer(first).answer_text == "from worker one"
        assert stored.find_answer(first).score == 80

    @pytest.mark.asyncio
    async def test_single_question_session_cannot_be_completed(self, engine):
        """Test that single-question sessions only complete through submission."""
        view = await engine.lifecycle.start_single_question("free-user", 42)

        with pytest.raises(SessionStateError):
            await engine.lifecycle.complete(view.id, "free-user")

    @pytest.mark.asyncio
    async def test_other_caller_cannot_complete(self, engine):
        """Test that completion is owner-only."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 1)

        with pytest.raises(SessionNotFoundError):
            await engine.lifecycle.complete(view.id, "other-user")


class TestReadingSessions:
    """Hydrated reads and history."""

    @pytest.mark.asyncio
    async def test_get_session_hydrates_questions(self, engine):
        """Test that a stored session is returned with question snapshots."""
        view = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 3)

        loaded = await engine.lifecycle.get_session(view.id, "free-user")

        assert [answer.question.id for answer in loaded.answers] == [answer.question.id for answer in view.answers]
        assert all(answer.question.content for answer in loaded.answers)

    @pytest.mark.asyncio
    async def test_get_session_with_removed_question(self, engine):
        """Test that a question missing from the catalog leaves an empty snapshot."""
        view = await engine.lifecycle.start_single_question("free-user", 42)
        engine.catalog.clear()

        loaded = await engine.lifecycle.get_session(view.id, "free-user")

        assert loaded.answers[0].question is None

    @pytest.mark.asyncio
    async def test_get_session_of_other_caller(self, engine):
        """Test that another caller's session is not found."""
        view = await engine.lifecycle.start_single_question("free-user", 42)

        with pytest.raises(SessionNotFoundError):
            await engine.lifecycle.get_session(view.id, "other-user")

    @pytest.mark.asyncio
    async def test_list_sessions_newest_first(self, engine):
        """Test the history is ordered newest first and scoped to the caller."""
        first = await engine.lifecycle.start_single_question("free-user", 42)
        engine.clock_value = NOW + timedelta(minutes=5)
        second = await engine.lifecycle.start_mock_interview("free-user", QuestionFilter(), 1)
        await engine.lifecycle.start_single_question("other-user", 42)

        sessions = await engine.lifecycle.list_sessions("free-user")

        assert [session.id for session in sessions] == [second.id, first.id]
