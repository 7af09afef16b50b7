from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, field_validator

CONTENT_MIN_LENGTH = 10
CONTENT_MAX_LENGTH = 5000


class Mood(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    CALM = "calm"
    ANXIOUS = "anxious"
    EXCITED = "excited"
    TIRED = "tired"
    GRATEFUL = "grateful"
    ANGRY = "angry"


MOOD_EMOJIS = {
    Mood.HAPPY: "😊",
    Mood.SAD: "😢",
    Mood.CALM: "😌",
    Mood.ANXIOUS: "😰",
    Mood.EXCITED: "🤩",
    Mood.TIRED: "😴",
    Mood.GRATEFUL: "🙏",
    Mood.ANGRY: "😠",
}


def clean_content(value: str) -> str:
    """
    Trims journal text and enforces the allowed length.

    Args:
        value (str): Raw text typed by the user.

    Returns:
        str: The trimmed text.

    Raises:
        ValueError: If the trimmed text is empty, too short or too long.
    """
    content = (value or "").strip()
    if not content:
        raise ValueError("Journal entry cannot be empty")
    if len(content) < CONTENT_MIN_LENGTH:
        raise ValueError(f"Journal entry should be at least {CONTENT_MIN_LENGTH} characters long")
    if len(content) > CONTENT_MAX_LENGTH:
        raise ValueError(f"Journal entry cannot exceed {CONTENT_MAX_LENGTH} characters")
    return content


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class JournalEntryBase(BaseSchema):
    id: str
    user_id: str
    content: str
    mood: Mood
    created_at: datetime
    updated_at: datetime
    clarity_points: int = 0
    is_minted: bool = False
    nft_address: Optional[str] = None
    transaction_signature: Optional[str] = None
    metadata_uri: Optional[str] = None
    is_sync: bool = False


class JournalEntryCreate(BaseSchema):
    content: str
    mood: Mood

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str) -> str:
        return clean_content(value)


class JournalEntryUpdate(BaseSchema):
    content: Optional[str] = None
    mood: Optional[Mood] = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return clean_content(value)
