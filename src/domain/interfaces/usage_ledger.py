"""Usage ledger interface."""

from datetime import datetime
from typing import Protocol, runtime_checkable

from ..entities.usage import ActionType, UsageEvent


@runtime_checkable
class UsageLedger(Protocol):
    """Append-only store of usage events, the primitive behind daily quotas."""

    async def record_event(self, event: UsageEvent) -> bool:
        """Append a usage event. Events are never updated or deleted.

        Idempotent per ``event.session_id``: a second event for a session
        that already has one is dropped.

        Returns:
            bool: True if the event was written, False if it was a duplicate.
        """
        ...

    async def count_events(self, caller_id: str, action_type: ActionType, since: datetime) -> int:
        """Count a caller's events of one action type at or after ``since``.

        Args:
            caller_id: The caller whose events are counted.
            action_type: Only events with exactly this action type count.
            since: Inclusive lower bound of the window (timezone-aware UTC).

        Returns:
            int: Number of matching events.
        """
        ...

    async def list_events(self, caller_id: str) -> list[UsageEvent]:
        """List a caller's events, oldest first."""
        ...
