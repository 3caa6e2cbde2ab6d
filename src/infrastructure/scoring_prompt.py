"""Prompt and response parsing shared by the LLM scoring providers."""

import json
import logging
import re

from pydantic import ValidationError

from ..domain.entities.scoring import ScoringResult
from ..domain.errors import ScoringProviderError

logger = logging.getLogger(__name__)

SCORING_SYSTEM_PROMPT = """You are a senior technical interviewer (Senior/Staff Engineer) reviewing a candidate's answer \
to an interview question about programming, system architecture or software technology.
Assess the answer as you would in a real technical interview: depth, scalability, performance and design trade-offs.

Give direct, friendly but candid feedback focused on the strengths and weaknesses of the answer. Address the \
candidate as "you".

SCORING RUBRIC (0-100):
- 0-30 (Poor): wrong, irrelevant, flippant, a refusal to answer, or a serious lack of understanding.
- 31-50 (Basic): only the most basic concepts, little technical detail, no mention of scale or performance.
- 51-70 (Fair): the core ideas are there but lack depth or skip important aspects.
- 71-85 (Good): clear and in depth, covers most important aspects; minor details or optimizations missing.
- 86-100 (Excellent): comprehensive, scalable, efficient and considers every important aspect.

ZERO SCORE RULE: if the answer is unrelated to the question, not serious, or refuses to answer \
(e.g. "I don't know", "nothing to say"), set "score" to 0, say plainly in "overall" that the answer does not meet \
the bar, leave "strengths" empty and state in "improvements" that better preparation and a real attempt are needed.

Respond ONLY with a valid JSON object with two top-level keys: "score" (an integer from 0 to 100) and "feedback". \
"feedback" must contain "overall" (a summary string), "strengths" (an array of strings) and "improvements" \
(an array of strings). Return JSON only, with no other text."""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def build_user_prompt(question: str, answer: str) -> str:
    return (
        f"Question: {question}\n\n"
        f"Your answer: {answer}\n\n"
        "Please assess my answer and give me detailed feedback."
    )


def parse_scoring_response(raw_text: str) -> ScoringResult:
    """Parse a provider's JSON reply into a validated ScoringResult.

    Markdown code fences around the JSON are tolerated.

    Raises:
        ScoringProviderError: If the reply is not JSON or does not match the schema.
    """
    cleaned = _CODE_FENCE.sub("", (raw_text or "").strip()).strip()
    if not cleaned:
        raise ScoringProviderError("Scoring provider returned an empty response")

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(f"Scoring response is not valid JSON: {cleaned[:200]!r}")
        raise ScoringProviderError(f"Scoring response is not valid JSON: {e}") from e

    try:
        return ScoringResult.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Scoring response does not match the expected schema: {e.error_count()} error(s)")
        raise ScoringProviderError(f"Scoring response does not match the expected schema: {e}") from e
