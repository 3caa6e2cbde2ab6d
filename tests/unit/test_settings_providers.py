"""Tests for the settings provider implementations."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from src.infrastructure.dynamodb_settings_provider import DynamoDBSettingsProvider
from src.infrastructure.local_settings_provider import LocalSettingsProvider, convert_setting


class TestConvertSetting:
    """Test cases for stored-value conversion."""

    def test_int_from_string(self):
        """Test numeric strings convert to int."""
        assert convert_setting(" 7 ", 5) == 7

    def test_int_from_decimal(self):
        """Test DynamoDB numbers convert to int."""
        assert convert_setting(Decimal("3"), 5) == 3

    def test_fractional_decimal_rejected(self):
        """Test that a fractional number is not silently truncated."""
        with pytest.raises(ValueError):
            convert_setting(Decimal("2.5"), 5)

    @pytest.mark.parametrize("raw,expected", [("true", True), ("0", False), ("Yes", True), ("off", False)])
    def test_bool_from_string(self, raw, expected):
        """Test boolean spellings."""
        assert convert_setting(raw, False) is expected

    def test_bool_not_accepted_as_int(self):
        """Test that a boolean is not an integer setting."""
        with pytest.raises(TypeError):
            convert_setting(True, 5)

    def test_string_passthrough(self):
        """Test values already of the default's type are returned as-is."""
        assert convert_setting("abc", "default") == "abc"


class TestLocalSettingsProvider:
    """Test cases for LocalSettingsProvider."""

    def test_missing_key_returns_default(self):
        """Test that unknown keys yield the default."""
        assert LocalSettingsProvider().get_value("FREE_USER_QUESTION_DAILY_LIMIT", 5) == 5

    def test_value_is_converted(self):
        """Test that stored values are converted to the default's type."""
        provider = LocalSettingsProvider({"FREE_USER_SESSION_DAILY_LIMIT": "4"})

        assert provider.get_value("FREE_USER_SESSION_DAILY_LIMIT", 2) == 4

    def test_unconvertible_value_returns_default(self):
        """Test that a bad value falls back to the default instead of raising."""
        provider = LocalSettingsProvider({"FREE_USER_SESSION_DAILY_LIMIT": "many"})

        assert provider.get_value("FREE_USER_SESSION_DAILY_LIMIT", 2) == 2

    def test_set_value_is_seen_on_next_read(self):
        """Test that values are resolved per call."""
        provider = LocalSettingsProvider()
        provider.set_value("FREE_USER_QUESTION_DAILY_LIMIT", 9)

        assert provider.get_value("FREE_USER_QUESTION_DAILY_LIMIT", 5) == 9


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table."""
    with patch("src.infrastructure.dynamodb_settings_provider.boto3") as mock_boto3:
        mock_resource = MagicMock()
        mock_table = MagicMock()
        mock_boto3.resource.return_value = mock_resource
        mock_resource.Table.return_value = mock_table
        yield mock_table


@pytest.fixture
def provider(mock_dynamodb_table):
    """Create a DynamoDB settings provider instance."""
    return DynamoDBSettingsProvider(table_name="test-settings", region_name="us-east-1")


class TestDynamoDBSettingsProvider:
    """Test cases for DynamoDBSettingsProvider."""

    def test_get_value(self, provider, mock_dynamodb_table):
        """Test reading and converting a stored value."""
        mock_dynamodb_table.get_item.return_value = {
            "Item": {"key": "FREE_USER_QUESTION_DAILY_LIMIT", "value": "10"}
        }

        assert provider.get_value("FREE_USER_QUESTION_DAILY_LIMIT", 5) == 10
        mock_dynamodb_table.get_item.assert_called_once_with(Key={"key": "FREE_USER_QUESTION_DAILY_LIMIT"})

    def test_missing_item_returns_default(self, provider, mock_dynamodb_table):
        """Test that a missing setting yields the default."""
        mock_dynamodb_table.get_item.return_value = {}

        assert provider.get_value("FREE_USER_QUESTION_DAILY_LIMIT", 5) == 5

    def test_client_error_returns_default(self, provider, mock_dynamodb_table):
        """Test that storage errors never propagate."""
        mock_dynamodb_table.get_item.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "no table"}}, "GetItem"
        )

        assert provider.get_value("FREE_USER_SESSION_DAILY_LIMIT", 2) == 2

    def test_connection_error_returns_default(self, provider, mock_dynamodb_table):
        """Test that transport errors never propagate."""
        mock_dynamodb_table.get_item.side_effect = EndpointConnectionError(endpoint_url="https://dynamodb")

        assert provider.get_value("FREE_USER_SESSION_DAILY_LIMIT", 2) == 2

    def test_bad_value_returns_default(self, provider, mock_dynamodb_table):
        """Test that unconvertible values yield the default."""
        mock_dynamodb_table.get_item.return_value = {"Item": {"key": "K", "value": "lots"}}

        assert provider.get_value("K", 2) == 2

    def test_value_read_on_every_call(self, provider, mock_dynamodb_table):
        """Test that changes take effect without restarting."""
        mock_dynamodb_table.get_item.side_effect = [
            {"Item": {"key": "K", "value": Decimal("1")}},
            {"Item": {"key": "K", "value": Decimal("3")}},
        ]

        assert provider.get_value("K", 5) == 1
        assert provider.get_value("K", 5) == 3
