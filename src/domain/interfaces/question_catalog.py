"""Question catalog protocol."""

from typing import Iterable, Protocol, runtime_checkable

from ..entities.question import Question


@runtime_checkable
class QuestionCatalog(Protocol):
    """Protocol for question catalog providers.

    The catalog is owned by another part of the system. The practice
    engine reads questions and increments their usage counters, nothing else.
    """

    def get_question(self, question_id: int) -> Question:
        """Retrieve a question by ID.

        Args:
            question_id: The unique identifier of the question.

        Returns:
            Question: The question snapshot.

        Raises:
            QuestionNotFoundError: If the question is not found.
        """
        ...

    def get_questions(self, question_ids: Iterable[int]) -> dict[int, Question]:
        """Retrieve several questions at once.

        Unknown ids are left out of the result instead of raising.
        """
        ...

    def list_questions(self, active_only: bool = True) -> list[Question]:
        """List catalog questions.

        Args:
            active_only: Only return questions flagged active.
        """
        ...

    def increment_usage(self, question_ids: Iterable[int]) -> None:
        """Add one to the global usage counter of each question."""
        ...
