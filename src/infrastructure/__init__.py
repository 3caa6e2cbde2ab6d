"""Infrastructure layer components."""

from .bedrock_scoring_provider import BedrockScoringConfig, BedrockScoringProvider
from .dynamodb_question_catalog import DynamoDBQuestionCatalog
from .dynamodb_session_repository import DynamoDBSessionRepository
from .dynamodb_settings_provider import DynamoDBSettingsProvider
from .dynamodb_subscriber_directory import DynamoDBSubscriberDirectory
from .dynamodb_usage_ledger import DynamoDBUsageLedger
from .local_question_catalog import LocalQuestionCatalog
from .local_session_repository import LocalSessionRepository
from .local_settings_provider import LocalSettingsProvider
from .local_subscriber_directory import LocalSubscriberDirectory
from .local_usage_ledger import LocalUsageLedger
from .openai_scoring_provider import OpenAIScoringProvider
from .simple_scoring_provider import SimpleScoringProvider

__all__ = [
    "BedrockScoringConfig",
    "BedrockScoringProvider",
    "DynamoDBQuestionCatalog",
    "DynamoDBSessionRepository",
    "DynamoDBSettingsProvider",
    "DynamoDBSubscriberDirectory",
    "DynamoDBUsageLedger",
    "LocalQuestionCatalog",
    "LocalSessionRepository",
    "LocalSettingsProvider",
    "LocalSubscriberDirectory",
    "LocalUsageLedger",
    "OpenAIScoringProvider",
    "SimpleScoringProvider",
]
