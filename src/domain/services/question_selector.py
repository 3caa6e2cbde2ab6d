"""Question sampling for practice sessions."""

import logging
import random
from typing import Optional

from ..entities.question import Question, QuestionFilter
from ..errors import InsufficientPoolError, QuestionNotFoundError
from ..interfaces.question_catalog import QuestionCatalog

logger = logging.getLogger(__name__)


class QuestionSelector:
    """Picks the questions a new session is built from."""

    def __init__(self, question_catalog: QuestionCatalog, rng: Optional[random.Random] = None):
        self.question_catalog = question_catalog
        self._rng = rng or random.Random()

    def eligible_pool(self, question_filter: QuestionFilter) -> list[Question]:
        candidates = self.question_catalog.list_questions(active_only=question_filter.active_only)
        return [question for question in candidates if question_filter.matches(question)]

    def select(self, question_filter: QuestionFilter, count: int) -> list[Question]:
        """Sample ``count`` distinct questions uniformly from the filtered pool.

        Args:
            question_filter: Category/difficulty criteria; active-only always applies.
            count: Number of questions wanted.

        Returns:
            list[Question]: Exactly ``count`` distinct questions in random order.

        Raises:
            InsufficientPoolError: If fewer than ``count`` questions qualify.
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")

        pool = self.eligible_pool(question_filter)
        if len(pool) < count:
            logger.warning(
                f"Question pool too small: requested {count}, {len(pool)} eligible "
                f"(categories={question_filter.category_ids}, "
                f"difficulties={[d.value for d in question_filter.difficulties]})"
            )
            raise InsufficientPoolError(requested=count, available=len(pool))

        return self._rng.sample(pool, count)

    def select_by_id(self, question_id: int) -> Question:
        """Return the question a caller named for single-question practice.

        Raises:
            QuestionNotFoundError: If the question does not exist or is inactive.
        """
        question = self.question_catalog.get_question(question_id)
        if not question.is_active:
            logger.warning(f"Question {question_id} requested for practice but is inactive")
            raise QuestionNotFoundError(
                question_id, f"Question with id {question_id} is not available for practice"
            )
        return question
