"""Question catalog entities for the interview practice engine."""

import logging
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    """Question difficulty levels."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: str) -> Optional["Difficulty"]:
        """Parse a difficulty name case-insensitively, returning None if unknown."""
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


class Category(BaseModel):
    """Question category."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class Tag(BaseModel):
    """Free-form question tag."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    slug: str


class Question(BaseModel):
    """Read-only snapshot of a catalog question.

    The catalog owns questions; the practice engine only reads them and
    bumps their usage counter when a session completes.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Unique identifier for the question")
    content: str = Field(min_length=1, description="Question text shown to the caller")
    sample_answer: Optional[str] = Field(None, description="Reference answer, if any")
    difficulty: Difficulty = Difficulty.MEDIUM
    is_active: bool = True
    usage_count: int = Field(default=0, ge=0)
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)

    @property
    def category_ids(self) -> set[int]:
        return {category.id for category in self.categories}


class QuestionFilter(BaseModel):
    """Filter criteria for question sampling.

    Criteria combine as a conjunction. An empty list means "no constraint"
    for that criterion.
    """

    category_ids: list[int] = Field(default_factory=list)
    difficulties: list[Difficulty] = Field(default_factory=list)
    active_only: bool = True

    @classmethod
    def from_request(
        cls,
        category_ids: Optional[Iterable[int]] = None,
        difficulty_levels: Optional[Iterable[str]] = None,
    ) -> "QuestionFilter":
        """Build a filter from caller-supplied values.

        Unknown difficulty names are dropped. If none of them parse, no
        difficulty constraint is applied.
        """
        difficulties = []
        for level in difficulty_levels or []:
            parsed = Difficulty.parse(level)
            if parsed is None:
                logger.warning(f"Ignoring unknown difficulty level {level!r}")
                continue
            if parsed not in difficulties:
                difficulties.append(parsed)

        return cls(
            category_ids=list(dict.fromkeys(category_ids or [])),
            difficulties=difficulties,
            active_only=True,
        )

    def matches(self, question: Question) -> bool:
        if self.active_only and not question.is_active:
            return False
        if self.category_ids and not question.category_ids.intersection(self.category_ids):
            return False
        if self.difficulties and question.difficulty not in self.difficulties:
            return False
        return True
