"""Test that provider implementations conform to their domain protocols."""

import inspect
from unittest.mock import patch

import pytest

from src.domain.interfaces import (
    QuestionCatalog,
    ScoringProvider,
    SessionRepository,
    SettingsProvider,
    SubscriberDirectory,
    UsageLedger,
)
from src.infrastructure import (
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


@pytest.fixture
def patched_boto3():
    """Keep the sync DynamoDB providers from creating real clients."""
    with patch("src.infrastructure.dynamodb_question_catalog.boto3"), \
            patch("src.infrastructure.dynamodb_subscriber_directory.boto3"), \
            patch("src.infrastructure.dynamodb_settings_provider.boto3"):
        yield


def test_local_providers_implement_protocols():
    """Test that every local provider satisfies its protocol."""
    assert isinstance(LocalSessionRepository(), SessionRepository)
    assert isinstance(LocalUsageLedger(), UsageLedger)
    assert isinstance(LocalQuestionCatalog(), QuestionCatalog)
    assert isinstance(LocalSubscriberDirectory(), SubscriberDirectory)
    assert isinstance(LocalSettingsProvider(), SettingsProvider)


def test_dynamodb_providers_implement_protocols(patched_boto3):
    """Test that every DynamoDB provider satisfies its protocol."""
    assert isinstance(DynamoDBSessionRepository("sessions"), SessionRepository)
    assert isinstance(DynamoDBUsageLedger("usage"), UsageLedger)
    assert isinstance(DynamoDBQuestionCatalog("questions"), QuestionCatalog)
    assert isinstance(DynamoDBSubscriberDirectory("subscribers"), SubscriberDirectory)
    assert isinstance(DynamoDBSettingsProvider("settings"), SettingsProvider)


@pytest.mark.parametrize(
    "factory",
    [
        SimpleScoringProvider,
        lambda: BedrockScoringProvider(BedrockScoringConfig()),
        lambda: OpenAIScoringProvider(api_key="sk-test"),
    ],
)
def test_scoring_providers_implement_protocol(factory):
    """Test that all scoring providers are interchangeable."""
    provider = factory()

    assert isinstance(provider, ScoringProvider)
    assert inspect.iscoroutinefunction(provider.score)


@pytest.mark.parametrize(
    "implementation, method",
    [
        (LocalSessionRepository, "get_session"),
        (DynamoDBSessionRepository, "get_session"),
        (LocalUsageLedger, "count_events"),
        (DynamoDBUsageLedger, "count_events"),
    ],
)
def test_async_storage_methods(implementation, method):
    """Test that session and usage storage expose coroutine methods."""
    assert inspect.iscoroutinefunction(getattr(implementation, method))


@pytest.mark.asyncio
async def test_local_providers_are_interchangeable_through_protocol():
    """Test that code typed against the protocols works with local providers."""
    catalog: QuestionCatalog = LocalQuestionCatalog()
    directory: SubscriberDirectory = LocalSubscriberDirectory()
    ledger: UsageLedger = LocalUsageLedger()

    assert catalog.get_question(1).id == 1
    assert directory.get_subscriber("demo-premium-user").is_free_tier is False
    assert await ledger.list_events("anyone") == []
