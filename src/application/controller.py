"""Practice Controller for handling business logic and coordination."""

import logging
from typing import Optional
from uuid import UUID

from ..domain.entities import (
    QuestionFilter,
    QuotaStatus,
    SessionSummary,
    SessionView,
    StartMockInterviewRequest,
    SubmitAnswerResponse,
)
from ..domain.interfaces.question_catalog import QuestionCatalog
from ..domain.interfaces.scoring_provider import ScoringProvider
from ..domain.interfaces.session_repository import SessionRepository
from ..domain.interfaces.settings_provider import SettingsProvider
from ..domain.interfaces.subscriber_directory import SubscriberDirectory
from ..domain.interfaces.usage_ledger import UsageLedger
from ..domain.services import (
    AnswerScoringCoordinator,
    QuestionSelector,
    QuotaGate,
    SessionLifecycleManager,
    SessionLocks,
)
from ..infrastructure import (
    BedrockScoringConfig,
    BedrockScoringProvider,
    DynamoDBQuestionCatalog,
    DynamoDBSessionRepository,
    DynamoDBSettingsProvider,
    DynamoDBSubscriberDirectory,
    DynamoDBUsageLedger,
    LocalQuestionCatalog,
    LocalSessionRepository,
    LocalSettingsProvider,
    LocalSubscriberDirectory,
    LocalUsageLedger,
    OpenAIScoringProvider,
    SimpleScoringProvider,
)
from .config import Settings

logger = logging.getLogger(__name__)


class PracticeController:
    """
    Controller for coordinating practice operations.

    This controller is injected with all necessary providers and handles
    the business logic for each endpoint, keeping the API layer thin.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        usage_ledger: UsageLedger,
        question_catalog: QuestionCatalog,
        subscriber_directory: SubscriberDirectory,
        settings_provider: SettingsProvider,
        scoring_provider: ScoringProvider,
        scoring_timeout: float = 30.0,
        question_selector: Optional[QuestionSelector] = None,
    ):
        """
        Initialize the controller with injected dependencies.

        Args:
            session_repository: Repository for session persistence
            usage_ledger: Append-only ledger of completed actions
            question_catalog: Read access to the question bank
            subscriber_directory: Caller account and tier lookup
            settings_provider: Runtime settings such as quota limits
            scoring_provider: External answer scorer
            scoring_timeout: Seconds to wait for the scorer before falling back
            question_selector: Optional selector, e.g. with a seeded RNG
        """
        self.session_repository = session_repository
        self.usage_ledger = usage_ledger
        self.question_catalog = question_catalog
        self.subscriber_directory = subscriber_directory
        self.settings_provider = settings_provider
        self.scoring_provider = scoring_provider

        session_locks = SessionLocks()
        self.quota_gate = QuotaGate(usage_ledger, settings_provider)
        self.scoring_coordinator = AnswerScoringCoordinator(
            session_repository=session_repository,
            question_catalog=question_catalog,
            usage_ledger=usage_ledger,
            scoring_provider=scoring_provider,
            session_locks=session_locks,
            scoring_timeout=scoring_timeout,
        )
        self.lifecycle = SessionLifecycleManager(
            session_repository=session_repository,
            question_catalog=question_catalog,
            subscriber_directory=subscriber_directory,
            quota_gate=self.quota_gate,
            question_selector=question_selector or QuestionSelector(question_catalog),
            scoring_coordinator=self.scoring_coordinator,
            session_locks=session_locks,
        )

        logger.info("PracticeController initialized with providers")

    async def start_single_question(self, caller_id: str, question_id: int) -> SessionView:
        return await self.lifecycle.start_single_question(caller_id, question_id)

    async def start_mock_interview(self, caller_id: str, request: StartMockInterviewRequest) -> SessionView:
        question_filter = QuestionFilter.from_request(request.category_ids, request.difficulty_levels)
        return await self.lifecycle.start_mock_interview(caller_id, question_filter, request.number_of_questions)

    async def submit_single_answer(self, session_id: UUID, caller_id: str, answer: str) -> SubmitAnswerResponse:
        result = await self.scoring_coordinator.submit(session_id, caller_id, answer)
        return SubmitAnswerResponse.from_result(result)

    async def submit_mock_answer(
        self,
        session_id: UUID,
        caller_id: str,
        question_id: int,
        answer: str,
    ) -> SubmitAnswerResponse:
        result = await self.scoring_coordinator.submit(session_id, caller_id, answer, question_id=question_id)
        return SubmitAnswerResponse.from_result(result)

    async def complete_session(self, session_id: UUID, caller_id: str) -> SessionView:
        return await self.lifecycle.complete(session_id, caller_id)

    async def get_session(self, session_id: UUID, caller_id: str) -> SessionView:
        return await self.lifecycle.get_session(session_id, caller_id)

    async def get_history(self, caller_id: str) -> list[SessionSummary]:
        """
        Get the caller's practice history, newest first.

        Raises:
            AuthenticationError: If the caller has no account.
        """
        self.lifecycle.resolve_subscriber(caller_id)
        sessions = await self.lifecycle.list_sessions(caller_id)
        return [SessionSummary.from_session(session) for session in sessions]

    async def get_quota_status(self, caller_id: str) -> list[QuotaStatus]:
        subscriber = self.lifecycle.resolve_subscriber(caller_id)
        decisions = await self.quota_gate.status(subscriber)
        return [QuotaStatus.from_decision(decision) for decision in decisions]

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        return {
            "status": "healthy",
            "providers": {
                "session_repository": type(self.session_repository).__name__,
                "usage_ledger": type(self.usage_ledger).__name__,
                "question_catalog": type(self.question_catalog).__name__,
                "subscriber_directory": type(self.subscriber_directory).__name__,
                "settings_provider": type(self.settings_provider).__name__,
                "scoring_provider": type(self.scoring_provider).__name__,
            },
        }


def build_scoring_provider(settings: Settings) -> ScoringProvider:
    """Create the scoring provider selected by ``scoring_provider_type``."""
    provider_type = settings.scoring_provider_type.lower()
    if provider_type == "bedrock":
        return BedrockScoringProvider(
            BedrockScoringConfig(
                model_id=settings.bedrock_model_id,
                region=settings.aws_region,
                max_tokens=settings.scoring_max_tokens,
                temperature=settings.scoring_temperature,
            )
        )
    if provider_type == "openai":
        if not settings.openai_api_key:
            raise ValueError("openai_api_key must be set when scoring_provider_type is 'openai'")
        return OpenAIScoringProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.scoring_max_tokens,
            temperature=settings.scoring_temperature,
        )
    if provider_type == "simple":
        return SimpleScoringProvider()
    raise ValueError(f"Unknown scoring provider type: {settings.scoring_provider_type}")


def build_controller(settings: Settings) -> PracticeController:
    """Wire a controller with the storage backend and scoring provider from settings."""
    backend = settings.storage_backend.lower()
    if backend == "dynamodb":
        region = settings.aws_region
        session_repository = DynamoDBSessionRepository(settings.sessions_table_name, region_name=region)
        usage_ledger = DynamoDBUsageLedger(settings.usage_table_name, region_name=region)
        question_catalog = DynamoDBQuestionCatalog(settings.questions_table_name, region_name=region)
        subscriber_directory = DynamoDBSubscriberDirectory(settings.subscribers_table_name, region_name=region)
        settings_provider = DynamoDBSettingsProvider(settings.settings_table_name, region_name=region)
    elif backend == "local":
        session_repository = LocalSessionRepository()
        usage_ledger = LocalUsageLedger()
        question_catalog = LocalQuestionCatalog()
        subscriber_directory = LocalSubscriberDirectory()
        settings_provider = LocalSettingsProvider(
            {
                "FREE_USER_QUESTION_DAILY_LIMIT": settings.free_user_question_daily_limit,
                "FREE_USER_SESSION_DAILY_LIMIT": settings.free_user_session_daily_limit,
            }
        )
    else:
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")

    logger.info(f"Using {backend} storage with {settings.scoring_provider_type} scoring")
    return PracticeController(
        session_repository=session_repository,
        usage_ledger=usage_ledger,
        question_catalog=question_catalog,
        subscriber_directory=subscriber_directory,
        settings_provider=settings_provider,
        scoring_provider=build_scoring_provider(settings),
        scoring_timeout=settings.scoring_timeout_seconds,
    )
