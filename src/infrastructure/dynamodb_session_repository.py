"""DynamoDB implementation of Session Repository."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import aioboto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from ..domain.entities.practice_session import (
    AnswerFeedback,
    PracticeSession,
    SessionAnswer,
    SessionKind,
    SessionStatus,
)
from ..domain.errors import ConcurrentModificationError, SessionNotFoundError
from ..domain.interfaces.session_repository import SessionRepository

logger = logging.getLogger(__name__)

CALLER_INDEX_NAME = "caller_id-index"


class DynamoDBSessionRepository(SessionRepository):
    """DynamoDB repository for managing session persistence.

    A session and its answers are stored as a single item, so every write
    replaces the whole aggregate at once. Listing by caller uses a global
    secondary index on ``caller_id`` with ``started_at`` as its sort key.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1", index_name: str = CALLER_INDEX_NAME):
        """Initialize the DynamoDB session repository.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
            index_name: GSI keyed by caller_id.
        """
        self.table_name = table_name
        self.region_name = region_name
        self.index_name = index_name
        self._session = aioboto3.Session()

    async def save_session(self, session: PracticeSession) -> None:
        """Save a session to DynamoDB.

        Raises:
            Exception: If the save operation fails.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(Item=self._session_to_item(session))

    async def get_session(self, session_id: UUID) -> PracticeSession:
        """Retrieve a session by ID from DynamoDB.

        Raises:
            SessionNotFoundError: If the session is not found.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.get_item(Key={"id": str(session_id)})

            if "Item" not in response:
                raise SessionNotFoundError(session_id)

            return self._item_to_session(response["Item"])

    async def update_session(self, session: PracticeSession) -> None:
        """Replace an existing session in DynamoDB.

        The put is conditional on the stored ``version`` matching the one
        the session was read at, so concurrent writers cannot overwrite
        each other. On success ``session.version`` is bumped.

        Raises:
            SessionNotFoundError: If the session does not exist.
            ConcurrentModificationError: If another writer updated it first.
        """
        item = self._session_to_item(session)
        item["version"] = session.version + 1

        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            try:
                await table.put_item(
                    Item=item,
                    ConditionExpression=Attr("id").exists() & Attr("version").eq(session.version),
                    ReturnValuesOnConditionCheckFailure="ALL_OLD",
                )
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") != "ConditionalCheckFailedException":
                    raise
                if "Item" not in e.response:
                    raise SessionNotFoundError(session.id) from e
                logger.warning(f"Rejected stale write of session {session.id} at version {session.version}")
                raise ConcurrentModificationError(session.id) from e

        session.version += 1

    async def list_sessions(self, caller_id: str) -> list[PracticeSession]:
        """List a caller's sessions, newest first."""
        sessions = []
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            query_kwargs: Dict[str, Any] = {
                "IndexName": self.index_name,
                "KeyConditionExpression": Key("caller_id").eq(caller_id),
                "ScanIndexForward": False,
            }
            while True:
                response = await table.query(**query_kwargs)
                sessions.extend(self._item_to_session(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key

        logger.debug(f"Loaded {len(sessions)} sessions for caller {caller_id}")
        return sorted(sessions, key=lambda session: session.started_at, reverse=True)

    def _session_to_item(self, session: PracticeSession) -> Dict[str, Any]:
        """Convert a PracticeSession aggregate to a DynamoDB item."""
        item: Dict[str, Any] = {
            "id": str(session.id),
            "caller_id": session.caller_id,
            "kind": session.kind.value,
            "status": session.status.value,
            "number_of_questions": session.number_of_questions,
            "started_at": session.started_at.isoformat(),
            "answers": [self._answer_to_item(answer) for answer in session.ordered_answers()],
            "version": session.version,
        }
        if session.completed_at is not None:
            item["completed_at"] = session.completed_at.isoformat()
        if session.overall_score is not None:
            item["overall_score"] = Decimal(str(session.overall_score))
        return item

    @staticmethod
    def _answer_to_item(answer: SessionAnswer) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "id": str(answer.id),
            "question_id": answer.question_id,
            "ordinal": answer.ordinal,
        }
        if answer.answer_text is not None:
            item["answer_text"] = answer.answer_text
        if answer.answered_at is not None:
            item["answered_at"] = answer.answered_at.isoformat()
        if answer.score is not None:
            item["score"] = answer.score
        if answer.feedback is not None:
            item["feedback"] = answer.feedback.model_dump()
        return item

    def _item_to_session(self, item: Dict[str, Any]) -> PracticeSession:
        """Convert a DynamoDB item to a PracticeSession aggregate."""
        session_id = UUID(item["id"])
        return PracticeSession(
            id=session_id,
            caller_id=item["caller_id"],
            kind=SessionKind(item["kind"]),
            status=SessionStatus(item["status"]),
            number_of_questions=int(item["number_of_questions"]),
            started_at=datetime.fromisoformat(item["started_at"]),
            completed_at=_parse_datetime(item.get("completed_at")),
            overall_score=item.get("overall_score"),
            answers=[self._item_to_answer(session_id, answer) for answer in item.get("answers", [])],
            version=int(item.get("version", 0)),
        )

    @staticmethod
    def _item_to_answer(session_id: UUID, item: Dict[str, Any]) -> SessionAnswer:
        feedback = item.get("feedback")
        return SessionAnswer(
            id=UUID(item["id"]),
            session_id=session_id,
            question_id=int(item["question_id"]),
            ordinal=int(item["ordinal"]),
            answer_text=item.get("answer_text"),
            answered_at=_parse_datetime(item.get("answered_at")),
            score=int(item["score"]) if item.get("score") is not None else None,
            feedback=AnswerFeedback(**feedback) if feedback else None,
        )


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
