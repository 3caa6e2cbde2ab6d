"""Local in-memory implementation of QuestionCatalog."""

from typing import Dict, Iterable, Optional

from ..domain.entities.question import Category, Difficulty, Question, Tag
from ..domain.errors import QuestionNotFoundError
from ..domain.interfaces.question_catalog import QuestionCatalog

BEHAVIORAL = Category(id=1, name="Behavioral")
SYSTEM_DESIGN = Category(id=2, name="System Design")
ALGORITHMS = Category(id=3, name="Algorithms")


def sample_questions() -> list[Question]:
    """A small seed catalog for local development."""
    leadership = Tag(id=1, name="Leadership", slug="leadership")
    scaling = Tag(id=2, name="Scaling", slug="scaling")
    return [
        Question(
            id=1,
            content="Tell me about a time you disagreed with a teammate. How did you resolve it?",
            sample_answer="Describe the situation, the disagreement, the actions you took and the outcome.",
            difficulty=Difficulty.EASY,
            categories=[BEHAVIORAL],
            tags=[leadership],
        ),
        Question(
            id=2,
            content="Describe a project that failed. What did you learn?",
            difficulty=Difficulty.MEDIUM,
            categories=[BEHAVIORAL],
        ),
        Question(
            id=3,
            content="How would you design a URL shortener that handles 10,000 writes per second?",
            difficulty=Difficulty.HARD,
            categories=[SYSTEM_DESIGN],
            tags=[scaling],
        ),
        Question(
            id=4,
            content="Design a rate limiter for a public API.",
            difficulty=Difficulty.MEDIUM,
            categories=[SYSTEM_DESIGN],
            tags=[scaling],
        ),
        Question(
            id=5,
            content="Explain how you would detect a cycle in a linked list.",
            sample_answer="Use two pointers moving at different speeds; if they meet there is a cycle.",
            difficulty=Difficulty.EASY,
            categories=[ALGORITHMS],
        ),
        Question(
            id=6,
            content="Find the k most frequent words in a large stream of text.",
            difficulty=Difficulty.HARD,
            categories=[ALGORITHMS],
        ),
        Question(
            id=7,
            content="Tell me about a time you mentored someone.",
            difficulty=Difficulty.MEDIUM,
            categories=[BEHAVIORAL],
            tags=[leadership],
            is_active=False,
        ),
    ]


class LocalQuestionCatalog(QuestionCatalog):
    """Local in-memory implementation of the QuestionCatalog protocol.

    Pre-populated with sample questions unless an explicit list is given.
    Useful for testing and development purposes.
    """

    def __init__(self, questions: Optional[Iterable[Question]] = None):
        self._questions: Dict[int, Question] = {}
        for question in sample_questions() if questions is None else questions:
            self.add_question(question)

    def get_question(self, question_id: int) -> Question:
        """Retrieve a question by ID.

        Raises:
            QuestionNotFoundError: If the question is not found.
        """
        if question_id not in self._questions:
            raise QuestionNotFoundError(question_id)

        return self._questions[question_id]

    def get_questions(self, question_ids: Iterable[int]) -> dict[int, Question]:
        return {
            question_id: self._questions[question_id]
            for question_id in question_ids
            if question_id in self._questions
        }

    def list_questions(self, active_only: bool = True) -> list[Question]:
        return [
            question
            for question in self._questions.values()
            if question.is_active or not active_only
        ]

    def increment_usage(self, question_ids: Iterable[int]) -> None:
        for question_id in question_ids:
            question = self._questions.get(question_id)
            if question is not None:
                self._questions[question_id] = question.model_copy(
                    update={"usage_count": question.usage_count + 1}
                )

    def add_question(self, question: Question) -> None:
        """Add or replace a question in the catalog."""
        self._questions[question.id] = question

    def clear(self) -> None:
        """Remove every question from the catalog."""
        self._questions.clear()
