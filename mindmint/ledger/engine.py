"""
Clarity points and streak ledger.

Every function here is pure: results depend only on the arguments, nothing is
read from or written to storage. Points are snapshotted onto an entry when it
is created or minted and are never recomputed for historical entries.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Protocol, Union

from mindmint.journals.schemas import Mood
from mindmint.ledger.schemas import ClarityPointsBreakdown, MoodPoint, PointsConfig, UserStats

DEFAULT_POINTS_CONFIG = PointsConfig()

DayLike = Union[date, datetime]


class LedgerEntry(Protocol):
    created_at: datetime
    mood: Mood
    is_minted: bool
    clarity_points: int


def _as_day(value: DayLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def compute_streak(entries: Iterable[LedgerEntry], as_of: DayLike) -> int:
    """
    Counts consecutive calendar days with at least one entry.

    The walk starts at `as_of` (today) when today already has an entry, or at
    the day before otherwise, and stops at the first day without an entry.
    Several entries on one day count once and entries dated after `as_of`
    are ignored, so the result does not depend on the order of `entries`.

    Args:
        entries (Iterable[LedgerEntry]): Entry history of one user.
        as_of (date | datetime): Reference "today"; time of day is discarded.

    Returns:
        int: Streak length in days, 0 for an empty history.
    """
    today = _as_day(as_of)
    days = {_as_day(entry.created_at) for entry in entries}
    days = {day for day in days if day <= today}
    if not days:
        return 0

    cursor = today if today in days else today - timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def streak_bonus(current_streak: int, config: PointsConfig = DEFAULT_POINTS_CONFIG) -> int:
    if current_streak >= config.streak_long_days:
        return config.streak_long_bonus
    if current_streak >= config.streak_medium_days:
        return config.streak_medium_bonus
    if current_streak >= config.streak_short_days:
        return config.streak_short_bonus
    return 0


def compute_clarity_points(
    entry: LedgerEntry,
    current_streak: int,
    mood_tracked: bool = True,
    config: PointsConfig = DEFAULT_POINTS_CONFIG,
) -> ClarityPointsBreakdown:
    """
    Breaks down the clarity points earned by one entry.

    Args:
        entry (LedgerEntry): The entry being created or minted.
        current_streak (int): Streak length at the time of the award.
        mood_tracked (bool): Whether the user tracked a mood with the entry.
        config (PointsConfig): Point constants and streak thresholds.

    Returns:
        ClarityPointsBreakdown: Components and their sum.

    Raises:
        ValueError: If the streak is negative or the mood is unknown.
    """
    if current_streak < 0:
        raise ValueError(f"Streak cannot be negative: {current_streak}")
    Mood(entry.mood)

    daily_entry = config.daily_entry
    mood_tracking = config.mood_tracking if mood_tracked else 0
    nft_minting = config.nft_minting if entry.is_minted else 0
    bonus = streak_bonus(current_streak, config)

    return ClarityPointsBreakdown(
        daily_entry=daily_entry,
        mood_tracking=mood_tracking,
        streak_bonus=bonus,
        nft_minting=nft_minting,
        total=daily_entry + mood_tracking + bonus + nft_minting,
    )


def compute_user_stats(
    entries: List[LedgerEntry],
    previous_longest: int,
    as_of: DayLike,
) -> UserStats:
    """
    Recomputes the cached user counters from the entry history.

    `longest_streak` only grows, and always covers the current streak.
    """
    current = compute_streak(entries, as_of)
    last_entry = max((entry.created_at for entry in entries), default=None)
    return UserStats(
        current_streak=current,
        longest_streak=max(previous_longest, current),
        total_clarity_points=sum(max(entry.clarity_points, 0) for entry in entries),
        last_entry_date=last_entry,
    )


def has_written_today(entries: Iterable[LedgerEntry], as_of: DayLike) -> bool:
    today = _as_day(as_of)
    return any(_as_day(entry.created_at) == today for entry in entries)


def get_recent_entries(entries: Iterable[LedgerEntry], days: int, as_of: datetime) -> List[LedgerEntry]:
    cutoff = as_of - timedelta(days=days)
    return [entry for entry in entries if entry.created_at >= cutoff]


def get_mood_distribution(entries: Iterable[LedgerEntry]) -> Dict[str, int]:
    counts = Counter(Mood(entry.mood).value for entry in entries)
    return dict(counts)


def get_weekly_mood_data(entries: Iterable[LedgerEntry], as_of: datetime) -> List[MoodPoint]:
    recent = sorted(get_recent_entries(entries, 7, as_of), key=lambda entry: entry.created_at)
    return [
        MoodPoint(
            date=entry.created_at.date().isoformat(),
            mood=Mood(entry.mood).value,
            points=entry.clarity_points,
        )
        for entry in recent
    ]


def get_streak_message(streak: int) -> str:
    if streak <= 0:
        return "Start your mindfulness journey today! 🌱"
    if streak == 1:
        return "Great start! Keep the momentum going! 💫"
    if streak < 3:
        return f"{streak} days strong! You're building a habit! 🔥"
    if streak < 7:
        return f"{streak} day streak! You're on fire! 🔥✨"
    if streak < 30:
        return f"Amazing {streak} day streak! You're a mindfulness champion! 🏆"
    return f"Incredible {streak} day streak! You're a true MindMint master! 👑"


def count_words(content: str) -> int:
    return len(content.split())


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
