"""Local in-memory implementation of UsageLedger."""

from datetime import datetime
from typing import List

from ..domain.entities.usage import ActionType, UsageEvent
from ..domain.interfaces.usage_ledger import UsageLedger


class LocalUsageLedger(UsageLedger):
    """Local in-memory implementation of the UsageLedger protocol.

    Keeps events in an append-only list for testing and development purposes.
    """

    def __init__(self):
        self._events: List[UsageEvent] = []

    async def record_event(self, event: UsageEvent) -> bool:
        if event.session_id is not None and any(
            recorded.session_id == event.session_id for recorded in self._events
        ):
            return False
        self._events.append(event)
        return True

    async def count_events(self, caller_id: str, action_type: ActionType, since: datetime) -> int:
        """Count a caller's events of one action type at or after ``since``."""
        return sum(
            1
            for event in self._events
            if event.caller_id == caller_id
            and event.action_type == action_type
            and event.occurred_at >= since
        )

    async def list_events(self, caller_id: str) -> list[UsageEvent]:
        return [event for event in self._events if event.caller_id == caller_id]

    def clear(self) -> None:
        """Clear all recorded events."""
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
