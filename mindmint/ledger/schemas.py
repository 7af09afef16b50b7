from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class PointsConfig(BaseModel):
    """
    Point constants and streak thresholds consumed by the ledger.

    Thresholds must be strictly increasing so the streak bonus stays a step
    function with non-overlapping bands.
    """

    daily_entry: int = Field(10, ge=0)
    mood_tracking: int = Field(5, ge=0)
    nft_minting: int = Field(20, ge=0)
    streak_short_bonus: int = Field(15, ge=0)
    streak_medium_bonus: int = Field(50, ge=0)
    streak_long_bonus: int = Field(200, ge=0)
    streak_short_days: int = Field(3, ge=1)
    streak_medium_days: int = Field(7, ge=1)
    streak_long_days: int = Field(30, ge=1)

    @model_validator(mode="after")
    def check_thresholds(self) -> "PointsConfig":
        if not self.streak_short_days < self.streak_medium_days < self.streak_long_days:
            raise ValueError("Streak thresholds must be strictly increasing")
        return self


class ClarityPointsBreakdown(BaseModel):
    daily_entry: int
    mood_tracking: int
    streak_bonus: int
    nft_minting: int
    total: int


class UserStats(BaseModel):
    current_streak: int
    longest_streak: int
    total_clarity_points: int
    last_entry_date: Optional[datetime] = None


class MoodPoint(BaseModel):
    date: str  # YYYY-MM-DD
    mood: str
    points: int
