"""OpenAI implementation of ScoringProvider."""

import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from ..domain.entities.scoring import ScoringResult
from ..domain.errors import ScoringProviderError
from .scoring_prompt import SCORING_SYSTEM_PROMPT, build_user_prompt, parse_scoring_response

logger = logging.getLogger(__name__)


class OpenAIScoringProvider:
    """Scores answers with an OpenAI chat model in JSON mode."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1500,
        temperature: float = 0.3,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def score(self, question: str, answer: str) -> ScoringResult:
        logger.info(f"Requesting OpenAI score with model {self.model}")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SCORING_SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(question, answer)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI request failed: {type(e).__name__}: {e}")
            raise ScoringProviderError(f"OpenAI request failed: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise ScoringProviderError("OpenAI returned an empty response")

        result = parse_scoring_response(response.choices[0].message.content)
        logger.info(f"OpenAI scored answer: {result.score}")
        return result
