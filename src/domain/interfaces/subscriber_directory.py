"""Subscriber directory protocol."""

from typing import Protocol, runtime_checkable

from ..entities.subscriber import Subscriber


@runtime_checkable
class SubscriberDirectory(Protocol):
    """Protocol for looking up caller accounts and their subscription tier."""

    def get_subscriber(self, caller_id: str) -> Subscriber:
        """Retrieve a subscriber by caller ID.

        Args:
            caller_id: The unique identifier of the caller.

        Returns:
            Subscriber: The caller account with its tier.

        Raises:
            AuthenticationError: If no account exists for the caller.
        """
        ...
