from typing import Protocol, runtime_checkable

from ..entities.scoring import ScoringResult


@runtime_checkable
class ScoringProvider(Protocol):

    async def score(self, question: str, answer: str) -> ScoringResult:
        """Score an answer to a question on a 0-100 scale with structured feedback.

        Raises:
            ScoringProviderError: On transport failures or malformed responses.
                A low score is a normal result, not an error.
        """
        ...
