"""DynamoDB implementation of SettingsProvider."""

import logging
from typing import TypeVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..domain.interfaces.settings_provider import SettingsProvider
from .local_settings_provider import convert_setting

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DynamoDBSettingsProvider(SettingsProvider):
    """Runtime settings stored as ``{"key": ..., "value": ...}`` items.

    Values are read on every call so changes take effect without a restart.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB settings provider.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)

    def get_value(self, key: str, default: T) -> T:
        try:
            response = self.table.get_item(Key={"key": key})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to read setting {key} from {self.table_name}: {e}; using default {default!r}")
            return default

        item = response.get("Item")
        if not item or item.get("value") is None:
            return default

        try:
            return convert_setting(item["value"], default)
        except (ValueError, TypeError):
            logger.warning(f"Setting {key} has unusable value {item['value']!r}; using default {default!r}")
            return default
