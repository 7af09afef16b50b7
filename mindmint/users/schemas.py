from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from mindmint.ledger.schemas import MoodPoint


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class UserPreferences(BaseSchema):
    enable_notifications: bool = True
    notification_time: str = Field("20:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    theme: Literal["light", "dark"] = "light"
    auto_sync: bool = True


class UserPreferencesUpdate(BaseSchema):
    enable_notifications: Optional[bool] = None
    notification_time: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    theme: Optional[Literal["light", "dark"]] = None
    auto_sync: Optional[bool] = None


class UserOut(BaseSchema):
    id: str
    wallet_address: Optional[str] = None
    total_clarity_points: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_entry_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    preferences: UserPreferences


class UserUpdate(BaseSchema):
    wallet_address: Optional[str] = None
    total_clarity_points: Optional[int] = Field(None, ge=0)
    current_streak: Optional[int] = Field(None, ge=0)
    longest_streak: Optional[int] = Field(None, ge=0)
    last_entry_date: Optional[datetime] = None
    preferences: Optional[UserPreferences] = None


class WalletConnectRequest(BaseModel):
    wallet_address: str = Field(..., min_length=32, max_length=44)


class UserInsights(BaseModel):
    current_streak: int
    longest_streak: int
    total_clarity_points: int
    has_written_today: bool
    streak_message: str
    mood_distribution: Dict[str, int]
    weekly_moods: List[MoodPoint]
