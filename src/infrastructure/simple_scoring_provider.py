"""Offline heuristic implementation of ScoringProvider for development."""

import logging
import re

from ..domain.entities.practice_session import AnswerFeedback
from ..domain.entities.scoring import ScoringResult

logger = logging.getLogger(__name__)

_WORD = re.compile(r"[A-Za-z0-9']+")
_REFUSALS = {"i don't know", "i dont know", "no idea", "pass", "nothing to say"}


class SimpleScoringProvider:
    """
    A deterministic stand-in for the LLM scoring provider.

    Scores by answer length and by how many of the question's words the
    answer picks up. Good enough to exercise the whole flow locally
    without credentials.
    """

    async def score(self, question: str, answer: str) -> ScoringResult:
        normalized = answer.strip().lower().rstrip(".!")
        answer_words = _WORD.findall(answer.lower())

        if not answer_words or normalized in _REFUSALS:
            logger.debug("SimpleScoringProvider: empty or refusal answer")
            return ScoringResult(
                score=0,
                feedback=AnswerFeedback(
                    overall="The answer does not address the question.",
                    strengths=[],
                    improvements=["Prepare for this topic and make a real attempt at answering."],
                ),
            )

        question_words = {word for word in _WORD.findall(question.lower()) if len(word) > 3}
        overlap = len(question_words.intersection(answer_words))
        length_points = min(len(answer_words), 150) * 50 // 150
        relevance_points = 40 * overlap // len(question_words) if question_words else 20
        score = min(10 + length_points + relevance_points, 100)

        strengths = []
        improvements = []
        if overlap:
            strengths.append("You engaged directly with the terms of the question.")
        else:
            improvements.append("Tie your answer back to the specifics of the question.")
        if len(answer_words) >= 80:
            strengths.append("The answer is detailed.")
        else:
            improvements.append("Add more depth: examples, trade-offs and edge cases.")

        logger.debug(f"SimpleScoringProvider scored {len(answer_words)} words with overlap {overlap}: {score}")
        return ScoringResult(
            score=score,
            feedback=AnswerFeedback(
                overall=f"Heuristic review scored this answer {score}/100.",
                strengths=strengths,
                improvements=improvements,
            ),
        )
