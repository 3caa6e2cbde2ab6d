"""DynamoDB implementation of SubscriberDirectory."""

import logging
from typing import Any, Dict

import boto3

from ..domain.entities.subscriber import Subscriber, SubscriptionTier
from ..domain.errors import AuthenticationError
from ..domain.interfaces.subscriber_directory import SubscriberDirectory

logger = logging.getLogger(__name__)


class DynamoDBSubscriberDirectory(SubscriberDirectory):
    """DynamoDB implementation of the SubscriberDirectory protocol."""

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB subscriber directory.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)

    def get_subscriber(self, caller_id: str) -> Subscriber:
        """Retrieve a subscriber by caller ID from DynamoDB.

        Raises:
            AuthenticationError: If the caller has no account.
        """
        response = self.table.get_item(Key={"id": caller_id})

        if "Item" not in response:
            raise AuthenticationError(f"No account found for caller {caller_id}")

        return self._item_to_subscriber(response["Item"])

    def _item_to_subscriber(self, item: Dict[str, Any]) -> Subscriber:
        """Convert a DynamoDB item to a Subscriber entity.

        Unknown tier names are treated as the free tier.
        """
        raw_tier = item.get("tier", SubscriptionTier.FREE.value)
        try:
            tier = SubscriptionTier(raw_tier)
        except ValueError:
            logger.warning(f"Unknown subscription tier {raw_tier!r} for caller {item['id']}; treating as Free")
            tier = SubscriptionTier.FREE

        return Subscriber(id=item["id"], tier=tier, email=item.get("email"))
