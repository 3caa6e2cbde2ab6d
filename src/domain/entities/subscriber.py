"""Subscriber entities for the interview practice engine."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SubscriptionTier(str, Enum):
    """Subscription tiers. Anything above FREE is unlimited."""

    FREE = "Free"
    PREMIUM = "Premium"


class Subscriber(BaseModel):
    """The authenticated caller together with their subscription tier."""

    id: str = Field(min_length=1)
    tier: SubscriptionTier = SubscriptionTier.FREE
    email: Optional[str] = None

    @property
    def is_free_tier(self) -> bool:
        return self.tier == SubscriptionTier.FREE

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "id": "user-123",
                "tier": "Free",
                "email": "candidate@example.com",
            }
        }
