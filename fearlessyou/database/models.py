"""
Data models for FearlessYou.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.formatting import format_countdown, format_wallet


class DayState(str, Enum):
    """Per-day progression state."""
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"


class Feeling(str, Enum):
    """How the user felt after a challenge."""
    PROUD = "Proud"
    SCARED = "Scared"
    NUMB = "Numb"
    NONE = "none"


class ActiveChallenge(BaseModel):
    """The single challenge currently accepted and counting down."""

    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=1, le=30, description="Accepted day")
    accepted_at: datetime = Field(..., description="When the challenge was accepted")
    deadline: datetime = Field(..., description="accepted_at plus the countdown length")
    remaining_seconds: int = Field(..., ge=0, description="Seconds left on the countdown")
    submitted: bool = Field(default=False, description="Whether the challenge was submitted")

    @property
    def lapsed(self) -> bool:
        return self.remaining_seconds == 0

    @property
    def display_remaining(self) -> str:
        return format_countdown(self.remaining_seconds)


class ChallengeProgress(BaseModel):
    """Snapshot of the whole challenge: wallet, completed days and active challenge."""

    model_config = ConfigDict(frozen=True)

    wallet: int = Field(default=0, ge=0, description="Coin balance")
    completed: FrozenSet[int] = Field(default_factory=frozenset, description="Submitted days")
    active: Optional[ActiveChallenge] = Field(default=None, description="Accepted challenge, if any")

    @field_validator("completed")
    @classmethod
    def validate_days(cls, v):
        for day in v:
            if not 1 <= day <= 30:
                raise ValueError(f"Invalid completed day: {day}")
        return v

    @property
    def display_wallet(self) -> str:
        return format_wallet(self.wallet)


class Feedback(BaseModel):
    """Feedback collected after a submitted challenge."""

    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=1, le=30, description="Day the feedback belongs to")
    feeling: Feeling = Field(default=Feeling.NONE, description="Selected feeling")
    text: str = Field(default="", description="Free-form story")
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
