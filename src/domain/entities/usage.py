"""Usage accounting entities for the interview practice engine."""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .practice_session import utc_now


class ActionType(str, Enum):
    """Rate-limited actions. Each one is counted against its own quota."""

    COMPLETE_SINGLE_QUESTION = "CompleteSingleQuestion"
    COMPLETE_FULL_MOCK_INTERVIEW = "CompleteFullMockInterview"


class UsageEvent(BaseModel):
    """Append-only record of one completed, quota-relevant action."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid.uuid4)
    caller_id: str
    action_type: ActionType
    occurred_at: datetime = Field(default_factory=utc_now)
    session_id: Optional[UUID] = None


class QuotaDecision(BaseModel):
    """Outcome of a quota check.

    ``limit`` and ``used`` stay None for unlimited (paid) subscribers.
    """

    action_type: ActionType
    allowed: bool
    limit: Optional[int] = None
    used: Optional[int] = None

    @property
    def unlimited(self) -> bool:
        return self.limit is None

    @property
    def remaining(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(self.limit - (self.used or 0), 0)
