"""Domain services for the interview practice engine."""

from .answer_scoring import AnswerScoringCoordinator
from .question_selector import QuestionSelector
from .quota_gate import QUOTA_POLICIES, QuotaGate, QuotaPolicy, start_of_utc_day
from .session_lifecycle import SessionLifecycleManager
from .session_locks import SessionLocks

__all__ = [
    "AnswerScoringCoordinator",
    "QuestionSelector",
    "QuotaGate",
    "QuotaPolicy",
    "QUOTA_POLICIES",
    "SessionLifecycleManager",
    "SessionLocks",
    "start_of_utc_day",
]
