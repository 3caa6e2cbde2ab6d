"""Tests for the question catalog implementations."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from src.domain.entities.question import Category, Difficulty, Question
from src.domain.errors import QuestionNotFoundError
from src.infrastructure.dynamodb_question_catalog import DynamoDBQuestionCatalog
from src.infrastructure.local_question_catalog import LocalQuestionCatalog


@pytest.fixture
def catalog():
    """Create a local catalog with three questions, one inactive."""
    return LocalQuestionCatalog(
        [
            Question(id=1, content="Q1", difficulty=Difficulty.EASY),
            Question(id=2, content="Q2", difficulty=Difficulty.HARD),
            Question(id=3, content="Q3", is_active=False),
        ]
    )


class TestLocalQuestionCatalog:
    """Test cases for LocalQuestionCatalog."""

    def test_default_catalog_is_seeded(self):
        """Test that the default catalog has active sample questions."""
        seeded = LocalQuestionCatalog()

        assert len(seeded.list_questions()) > 0
        assert len(seeded.list_questions(active_only=False)) > len(seeded.list_questions())

    def test_get_question(self, catalog):
        """Test retrieving a question by id."""
        assert catalog.get_question(2).content == "Q2"

    def test_get_question_not_found(self, catalog):
        """Test that unknown ids raise QuestionNotFoundError."""
        with pytest.raises(QuestionNotFoundError, match="Question with id 99 not found"):
            catalog.get_question(99)

    def test_get_questions_skips_unknown_ids(self, catalog):
        """Test bulk retrieval leaves out unknown ids."""
        questions = catalog.get_questions([1, 99, 3])

        assert set(questions) == {1, 3}

    def test_list_questions_active_only(self, catalog):
        """Test that inactive questions are excluded by default."""
        assert {question.id for question in catalog.list_questions()} == {1, 2}
        assert {question.id for question in catalog.list_questions(active_only=False)} == {1, 2, 3}

    def test_increment_usage(self, catalog):
        """Test that each listed question gains one use."""
        catalog.increment_usage([1, 2, 99])
        catalog.increment_usage([1])

        assert catalog.get_question(1).usage_count == 2
        assert catalog.get_question(2).usage_count == 1


@pytest.fixture
def mock_boto3():
    """Patch boto3 for the DynamoDB catalog."""
    with patch("src.infrastructure.dynamodb_question_catalog.boto3") as mock_boto3:
        mock_resource = MagicMock()
        mock_table = MagicMock()
        mock_boto3.resource.return_value = mock_resource
        mock_resource.Table.return_value = mock_table
        yield mock_resource, mock_table


@pytest.fixture
def sample_item():
    """Create a sample DynamoDB question item."""
    return {
        "id": Decimal("42"),
        "content": "Design a cache.",
        "difficulty": "hard",
        "is_active": True,
        "usage_count": Decimal("7"),
        "categories": [{"id": Decimal("2"), "name": "System Design"}],
        "tags": [{"id": Decimal("1"), "name": "Caching"}],
    }


class TestDynamoDBQuestionCatalog:
    """Test cases for DynamoDBQuestionCatalog."""

    def test_get_question(self, mock_boto3, sample_item):
        """Test retrieving and converting a question item."""
        _, mock_table = mock_boto3
        mock_table.get_item.return_value = {"Item": sample_item}
        catalog = DynamoDBQuestionCatalog("test-questions")

        question = catalog.get_question(42)

        assert question.id == 42
        assert question.difficulty == Difficulty.HARD
        assert question.usage_count == 7
        assert question.categories == [Category(id=2, name="System Design")]
        assert question.tags[0].slug == "caching"
        mock_table.get_item.assert_called_once_with(Key={"id": 42})

    def test_get_question_not_found(self, mock_boto3):
        """Test that a missing item raises QuestionNotFoundError."""
        _, mock_table = mock_boto3
        mock_table.get_item.return_value = {}
        catalog = DynamoDBQuestionCatalog("test-questions")

        with pytest.raises(QuestionNotFoundError):
            catalog.get_question(42)

    def test_list_questions_scans_all_pages(self, mock_boto3, sample_item):
        """Test that listing follows scan pagination and filters active questions."""
        _, mock_table = mock_boto3
        second = dict(sample_item, id=Decimal("43"))
        mock_table.scan.side_effect = [
            {"Items": [sample_item], "LastEvaluatedKey": {"id": Decimal("42")}},
            {"Items": [second]},
        ]
        catalog = DynamoDBQuestionCatalog("test-questions")

        questions = catalog.list_questions()

        assert [question.id for question in questions] == [42, 43]
        assert "FilterExpression" in mock_table.scan.call_args_list[0].kwargs
        assert mock_table.scan.call_args_list[1].kwargs["ExclusiveStartKey"] == {"id": Decimal("42")}

    def test_get_questions_batches(self, mock_boto3, sample_item):
        """Test bulk retrieval through BatchGetItem."""
        mock_resource, _ = mock_boto3
        mock_resource.batch_get_item.return_value = {"Responses": {"test-questions": [sample_item]}}
        catalog = DynamoDBQuestionCatalog("test-questions")

        questions = catalog.get_questions([42, 42, 99])

        assert list(questions) == [42]
        request = mock_resource.batch_get_item.call_args.kwargs["RequestItems"]
        assert request == {"test-questions": {"Keys": [{"id": 42}, {"id": 99}]}}

    def test_get_questions_empty(self, mock_boto3):
        """Test that no ids means no request."""
        mock_resource, _ = mock_boto3
        catalog = DynamoDBQuestionCatalog("test-questions")

        assert catalog.get_questions([]) == {}
        mock_resource.batch_get_item.assert_not_called()

    def test_increment_usage(self, mock_boto3):
        """Test that usage counters are incremented atomically per question."""
        _, mock_table = mock_boto3
        catalog = DynamoDBQuestionCatalog("test-questions")

        catalog.increment_usage([1, 2])

        assert mock_table.update_item.call_count == 2
        first = mock_table.update_item.call_args_list[0].kwargs
        assert first["Key"] == {"id": 1}
        assert first["UpdateExpression"] == "ADD usage_count :one"
        assert first["ExpressionAttributeValues"] == {":one": 1}

    def test_increment_usage_skips_missing_questions(self, mock_boto3):
        """Test that a deleted question does not stop the remaining counters."""
        _, mock_table = mock_boto3
        mock_table.update_item.side_effect = [
            None,
            ClientError({"Error": {"Code": "ConditionalCheckFailedException", "Message": "gone"}}, "UpdateItem"),
            None,
        ]
        catalog = DynamoDBQuestionCatalog("test-questions")

        catalog.increment_usage([1, 2, 3])

        assert [call.kwargs["Key"] for call in mock_table.update_item.call_args_list] == [
            {"id": 1},
            {"id": 2},
            {"id": 3},
        ]

    def test_increment_usage_propagates_other_errors(self, mock_boto3):
        """Test that throttling and other failures are not swallowed."""
        _, mock_table = mock_boto3
        mock_table.update_item.side_effect = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}}, "UpdateItem"
        )
        catalog = DynamoDBQuestionCatalog("test-questions")

        with pytest.raises(ClientError):
            catalog.increment_usage([1])
