"""Local in-memory implementation of SubscriberDirectory."""

from typing import Dict

from ..domain.entities.subscriber import Subscriber, SubscriptionTier
from ..domain.errors import AuthenticationError
from ..domain.interfaces.subscriber_directory import SubscriberDirectory

DEMO_FREE_CALLER_ID = "demo-free-user"
DEMO_PREMIUM_CALLER_ID = "demo-premium-user"


class LocalSubscriberDirectory(SubscriberDirectory):
    """Local in-memory implementation of the SubscriberDirectory protocol.

    Stores subscribers in a dictionary for testing and development purposes.
    """

    def __init__(self, seed_demo_accounts: bool = True):
        """Initialize the directory, optionally with one free and one premium demo account."""
        self._subscribers: Dict[str, Subscriber] = {}

        if seed_demo_accounts:
            self.add_subscriber(
                Subscriber(id=DEMO_FREE_CALLER_ID, tier=SubscriptionTier.FREE, email="free@example.com")
            )
            self.add_subscriber(
                Subscriber(id=DEMO_PREMIUM_CALLER_ID, tier=SubscriptionTier.PREMIUM, email="premium@example.com")
            )

    def get_subscriber(self, caller_id: str) -> Subscriber:
        """Retrieve a subscriber by caller ID.

        Raises:
            AuthenticationError: If the caller has no account.
        """
        if caller_id not in self._subscribers:
            raise AuthenticationError(f"No account found for caller {caller_id}")

        return self._subscribers[caller_id]

    def add_subscriber(self, subscriber: Subscriber) -> None:
        """Add or update a subscriber in the dictionary."""
        self._subscribers[subscriber.id] = subscriber

    def clear(self) -> None:
        """Clear all subscribers from the dictionary."""
        self._subscribers.clear()
