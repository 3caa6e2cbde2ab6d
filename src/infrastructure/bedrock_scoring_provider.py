"""Amazon Bedrock implementation of ScoringProvider."""

import logging
from dataclasses import dataclass

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from ..domain.entities.scoring import ScoringResult
from ..domain.errors import ScoringProviderError
from .scoring_prompt import SCORING_SYSTEM_PROMPT, build_user_prompt, parse_scoring_response

logger = logging.getLogger(__name__)


@dataclass
class BedrockScoringConfig:
    """Configuration for the Bedrock scoring provider."""

    model_id: str = "anthropic.claude-3-haiku-20240307-v1:0"
    region: str = "us-east-1"
    max_tokens: int = 1500
    temperature: float = 0.3


class BedrockScoringProvider:
    """
    Scores answers with a Bedrock chat model through the Converse API.

    Every transport or payload failure is raised as ScoringProviderError;
    the scoring coordinator decides what to do about it.
    """

    def __init__(self, config: BedrockScoringConfig):
        self.config = config
        self._session = aioboto3.Session()

    async def score(self, question: str, answer: str) -> ScoringResult:
        logger.info(f"Requesting Bedrock score with model {self.config.model_id}")
        try:
            async with self._session.client("bedrock-runtime", region_name=self.config.region) as client:
                response = await client.converse(
                    modelId=self.config.model_id,
                    system=[{"text": SCORING_SYSTEM_PROMPT}],
                    messages=[
                        {"role": "user", "content": [{"text": build_user_prompt(question, answer)}]},
                    ],
                    inferenceConfig={
                        "maxTokens": self.config.max_tokens,
                        "temperature": self.config.temperature,
                    },
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Bedrock converse call failed: {e}")
            raise ScoringProviderError(f"Bedrock request failed: {e}") from e

        content = response.get("output", {}).get("message", {}).get("content", [])
        text = "".join(block.get("text", "") for block in content)
        logger.debug(f"Bedrock response: {text}")

        result = parse_scoring_response(text)
        logger.info(f"Bedrock scored answer: {result.score}")
        return result
