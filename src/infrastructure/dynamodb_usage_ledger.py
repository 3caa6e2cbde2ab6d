"""DynamoDB implementation of UsageLedger."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID

import aioboto3
from boto3.dynamodb.conditions import Attr, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from ..domain.entities.usage import ActionType, UsageEvent
from ..domain.interfaces.usage_ledger import UsageLedger

logger = logging.getLogger(__name__)


# Guard items share the partition with events. Their sort keys sort after
# every ISO timestamp, so time-window queries bound above by this prefix.
SESSION_GUARD_PREFIX = "session#"

_serializer = TypeSerializer()


def _serialize(item: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _serializer.serialize(value) for key, value in item.items()}


def _guard_already_exists(error: ClientError) -> bool:
    if error.response.get("Error", {}).get("Code") != "TransactionCanceledException":
        return False
    reasons = error.response.get("CancellationReasons", [])
    return bool(reasons) and reasons[0].get("Code") == "ConditionalCheckFailed"


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class DynamoDBUsageLedger(UsageLedger):
    """DynamoDB ledger of completed, quota-relevant actions.

    Items are partitioned by ``caller_id``. The sort key is the UTC
    ISO-8601 timestamp followed by the event id, so a key condition on
    the timestamp prefix selects a time window and events never collide.
    Per-session guard items (``session#<id>``) live in the same partition
    and make completion events idempotent.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB usage ledger.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def record_event(self, event: UsageEvent) -> bool:
        """Append an event to the ledger.

        An event tied to a session is written in one transaction with a
        guard item keyed by the session id, so the ledger holds at most one
        event per session however often the completion is retried.

        Returns:
            bool: True if written, False if the session already had an event.

        Raises:
            Exception: If the write fails.
        """
        item = self._event_to_item(event)
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            if event.session_id is None:
                table = await dynamodb.Table(self.table_name)
                await table.put_item(Item=item)
                return True

            guard = {
                "caller_id": event.caller_id,
                "sort_key": f"{SESSION_GUARD_PREFIX}{event.session_id}",
                "event_id": str(event.id),
            }
            try:
                await dynamodb.meta.client.transact_write_items(
                    TransactItems=[
                        {
                            "Put": {
                                "TableName": self.table_name,
                                "Item": _serialize(guard),
                                "ConditionExpression": "attribute_not_exists(sort_key)",
                            }
                        },
                        {"Put": {"TableName": self.table_name, "Item": _serialize(item)}},
                    ]
                )
            except ClientError as e:
                if not _guard_already_exists(e):
                    raise
                logger.info(f"Usage for session {event.session_id} is already recorded; skipping duplicate event")
                return False
        return True

    async def count_events(self, caller_id: str, action_type: ActionType, since: datetime) -> int:
        """Count a caller's events of one action type at or after ``since``."""
        count = 0
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            query_kwargs: Dict[str, Any] = {
                "KeyConditionExpression": Key("caller_id").eq(caller_id)
                & Key("sort_key").between(_as_utc(since).isoformat(), SESSION_GUARD_PREFIX),
                "FilterExpression": Attr("action_type").eq(action_type.value),
                "Select": "COUNT",
            }
            while True:
                response = await table.query(**query_kwargs)
                count += response.get("Count", 0)
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key

        logger.debug(f"Caller {caller_id} has {count} {action_type.value} events since {since.isoformat()}")
        return count

    async def list_events(self, caller_id: str) -> list[UsageEvent]:
        events = []
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            query_kwargs: Dict[str, Any] = {
                "KeyConditionExpression": Key("caller_id").eq(caller_id)
                & Key("sort_key").lt(SESSION_GUARD_PREFIX)
            }
            while True:
                response = await table.query(**query_kwargs)
                events.extend(self._item_to_event(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        return events

    def _event_to_item(self, event: UsageEvent) -> Dict[str, Any]:
        occurred_at = _as_utc(event.occurred_at).isoformat()
        item = {
            "caller_id": event.caller_id,
            "sort_key": f"{occurred_at}#{event.id}",
            "id": str(event.id),
            "action_type": event.action_type.value,
            "occurred_at": occurred_at,
        }
        if event.session_id is not None:
            item["session_id"] = str(event.session_id)
        return item

    def _item_to_event(self, item: Dict[str, Any]) -> UsageEvent:
        return UsageEvent(
            id=UUID(item["id"]),
            caller_id=item["caller_id"],
            action_type=ActionType(item["action_type"]),
            occurred_at=datetime.fromisoformat(item["occurred_at"]),
            session_id=UUID(item["session_id"]) if item.get("session_id") else None,
        )
