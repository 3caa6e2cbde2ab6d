"""DynamoDB implementation of QuestionCatalog."""

import logging
from typing import Any, Dict, Iterable

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from ..domain.entities.question import Category, Difficulty, Question, Tag
from ..domain.errors import QuestionNotFoundError
from ..domain.interfaces.question_catalog import QuestionCatalog

logger = logging.getLogger(__name__)


class DynamoDBQuestionCatalog(QuestionCatalog):
    """DynamoDB implementation of the QuestionCatalog protocol.

    Question items are keyed by their numeric ``id``. Categories and tags
    are embedded as lists of maps on each question item.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB question catalog.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)

    def get_question(self, question_id: int) -> Question:
        """Retrieve a question by ID from DynamoDB.

        Raises:
            QuestionNotFoundError: If the question is not found.
        """
        response = self.table.get_item(Key={"id": question_id})

        if "Item" not in response:
            raise QuestionNotFoundError(question_id)

        return self._item_to_question(response["Item"])

    def get_questions(self, question_ids: Iterable[int]) -> dict[int, Question]:
        ids = list(dict.fromkeys(question_ids))
        if not ids:
            return {}

        questions: dict[int, Question] = {}
        # BatchGetItem accepts at most 100 keys per request
        for start in range(0, len(ids), 100):
            request = {self.table_name: {"Keys": [{"id": question_id} for question_id in ids[start:start + 100]]}}
            while request:
                response = self.dynamodb.batch_get_item(RequestItems=request)
                for item in response.get("Responses", {}).get(self.table_name, []):
                    question = self._item_to_question(item)
                    questions[question.id] = question
                request = response.get("UnprocessedKeys") or None
        return questions

    def list_questions(self, active_only: bool = True) -> list[Question]:
        scan_kwargs: Dict[str, Any] = {}
        if active_only:
            scan_kwargs["FilterExpression"] = Attr("is_active").eq(True)

        questions = []
        while True:
            response = self.table.scan(**scan_kwargs)
            questions.extend(self._item_to_question(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            scan_kwargs["ExclusiveStartKey"] = last_key

        logger.debug(f"Loaded {len(questions)} questions from {self.table_name}")
        return questions

    def increment_usage(self, question_ids: Iterable[int]) -> None:
        """Atomically add one to each question's usage counter.

        Questions that no longer exist are skipped; the rest are still counted.
        """
        for question_id in question_ids:
            try:
                self.table.update_item(
                    Key={"id": question_id},
                    UpdateExpression="ADD usage_count :one",
                    ConditionExpression="attribute_exists(id)",
                    ExpressionAttributeValues={":one": 1},
                )
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") != "ConditionalCheckFailedException":
                    raise
                logger.warning(f"Skipped usage counter for missing question {question_id}")

    def _item_to_question(self, item: Dict[str, Any]) -> Question:
        """Convert a DynamoDB item to a Question snapshot."""
        difficulty = Difficulty.parse(item.get("difficulty", "")) or Difficulty.MEDIUM
        return Question(
            id=int(item["id"]),
            content=item["content"],
            sample_answer=item.get("sample_answer"),
            difficulty=difficulty,
            is_active=bool(item.get("is_active", True)),
            usage_count=int(item.get("usage_count", 0)),
            categories=[
                Category(id=int(category["id"]), name=category["name"])
                for category in item.get("categories", [])
            ],
            tags=[
                Tag(id=int(tag["id"]), name=tag["name"], slug=tag.get("slug", tag["name"].lower()))
                for tag in item.get("tags", [])
            ],
        )
