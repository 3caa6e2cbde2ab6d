"""Daily quota enforcement for free-tier callers."""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import Callable

from ..entities.practice_session import utc_now
from ..entities.subscriber import Subscriber
from ..entities.usage import ActionType, QuotaDecision
from ..errors import QuotaExceededError
from ..interfaces.settings_provider import SettingsProvider
from ..interfaces.usage_ledger import UsageLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaPolicy:
    """Where an action's daily limit comes from and how a denial reads."""

    setting_key: str
    default_limit: int
    denial_message: str


QUOTA_POLICIES: dict[ActionType, QuotaPolicy] = {
    ActionType.COMPLETE_SINGLE_QUESTION: QuotaPolicy(
        setting_key="FREE_USER_QUESTION_DAILY_LIMIT",
        default_limit=5,
        denial_message="You have reached your daily limit of {limit} completed practice sessions.",
    ),
    ActionType.COMPLETE_FULL_MOCK_INTERVIEW: QuotaPolicy(
        setting_key="FREE_USER_SESSION_DAILY_LIMIT",
        default_limit=2,
        denial_message="You have reached your daily limit of {limit} full mock interviews.",
    ),
}


def start_of_utc_day(moment: datetime) -> datetime:
    """Midnight UTC of the calendar day containing ``moment``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return datetime.combine(moment.date(), time.min, tzinfo=timezone.utc)


class QuotaGate:
    """
    Decides whether a caller may start a rate-limited action now.

    Free-tier callers get a per-action daily limit, counted over completed
    actions recorded in the usage ledger since the start of the current UTC
    day. Paid tiers bypass the check entirely.

    The check is read-only. The matching usage event is appended later,
    when the session completes, so starting sessions never consumes quota.
    """

    def __init__(
        self,
        usage_ledger: UsageLedger,
        settings_provider: SettingsProvider,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.usage_ledger = usage_ledger
        self.settings_provider = settings_provider
        self.clock = clock

    def limit_for(self, action_type: ActionType) -> int:
        policy = QUOTA_POLICIES[action_type]
        return self.settings_provider.get_value(policy.setting_key, policy.default_limit)

    async def check(self, subscriber: Subscriber, action_type: ActionType) -> QuotaDecision:
        """Check the quota for one action without consuming it."""
        if not subscriber.is_free_tier:
            return QuotaDecision(action_type=action_type, allowed=True)

        limit = self.limit_for(action_type)
        window_start = start_of_utc_day(self.clock())
        used = await self.usage_ledger.count_events(subscriber.id, action_type, window_start)

        return QuotaDecision(
            action_type=action_type,
            allowed=used < limit,
            limit=limit,
            used=used,
        )

    async def ensure_allowed(self, subscriber: Subscriber, action_type: ActionType) -> QuotaDecision:
        """Check the quota and raise if the caller is over their limit.

        Raises:
            QuotaExceededError: If the daily limit has been reached.
        """
        decision = await self.check(subscriber, action_type)
        if decision.allowed:
            return decision

        logger.warning(
            f"Quota exceeded for caller {subscriber.id}: {action_type.value} "
            f"used {decision.used} of {decision.limit}"
        )
        message = QUOTA_POLICIES[action_type].denial_message.format(limit=decision.limit)
        raise QuotaExceededError(
            message,
            action_type=action_type,
            limit=decision.limit,
            used=decision.used,
        )

    async def status(self, subscriber: Subscriber) -> list[QuotaDecision]:
        """Quota state for every rate-limited action."""
        return [await self.check(subscriber, action_type) for action_type in QUOTA_POLICIES]

