"""Domain interfaces for the interview practice engine."""

from .question_catalog import QuestionCatalog
from .scoring_provider import ScoringProvider
from .session_repository import SessionRepository
from .settings_provider import SettingsProvider
from .subscriber_directory import SubscriberDirectory
from .usage_ledger import UsageLedger

__all__ = [
    "QuestionCatalog",
    "ScoringProvider",
    "SessionRepository",
    "SettingsProvider",
    "SubscriberDirectory",
    "UsageLedger",
]
