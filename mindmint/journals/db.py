from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session
from mindmint.journals.models import JournalEntry
from mindmint.journals.schemas import JournalEntryBase, JournalEntryCreate, JournalEntryUpdate


# Journal Entry CRUD
def get_journal(db: Session, journal_id: str) -> Optional[JournalEntry]:
    """
    Retrieves a journal entry by its ID.

    Args:
        db (Session): SQLAlchemy session.
        journal_id (str): ID of the journal.

    Returns:
        Optional[JournalEntry]: The journal if found, else None.
    """
    return db.query(JournalEntry).filter(JournalEntry.id == journal_id).first()


def get_user_journals(db: Session, user_id: str, limit: Optional[int] = None) -> List[JournalEntry]:
    """
    Retrieves a user's journal entries, newest first.

    Args:
        db (Session): SQLAlchemy session.
        user_id (str): ID of the owner.
        limit (Optional[int]): Maximum number of entries, all when None.

    Returns:
        List[JournalEntry]: The user's entries.
    """
    query = (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user_id)
        .order_by(JournalEntry.created_at.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_day_journal(db: Session, user_id: str, day: date) -> Optional[JournalEntry]:
    start = datetime.combine(day, time.min)
    return (
        db.query(JournalEntry)
        .filter(
            JournalEntry.user_id == user_id,
            JournalEntry.created_at >= start,
            JournalEntry.created_at < start + timedelta(days=1),
        )
        .order_by(JournalEntry.created_at.desc())
        .first()
    )


def create_journal(
    db: Session,
    journal_id: str,
    journal: JournalEntryCreate,
    user_id: str,
    clarity_points: int,
    now: datetime,
) -> JournalEntry:
    """
    Creates a new, unsynced and unminted journal entry.

    Args:
        db (Session): SQLAlchemy session.
        journal_id (str): ID for the new entry.
        journal (JournalEntryCreate): Validated content and mood.
        user_id (str): ID of the owner.
        clarity_points (int): Points snapshot awarded at creation.
        now (datetime): Creation timestamp.

    Returns:
        JournalEntry: The created journal.
    """
    new_journal = JournalEntry(
        id=journal_id,
        user_id=user_id,
        content=journal.content,
        mood=journal.mood.value,
        created_at=now,
        updated_at=now,
        clarity_points=clarity_points,
        is_minted=False,
        is_sync=False,
    )
    db.add(new_journal)
    db.commit()
    db.refresh(new_journal)
    return new_journal


def update_journal(db: Session, journal_id: str, updated_journal: JournalEntryUpdate, now: datetime) -> Optional[JournalEntry]:
    """
    Applies a content/mood edit. Any edit marks the entry for re-mirroring.

    Args:
        db (Session): SQLAlchemy session.
        journal_id (str): ID of the journal to update.
        updated_journal (JournalEntryUpdate): Fields to change.
        now (datetime): Edit timestamp.

    Returns:
        Optional[JournalEntry]: The updated journal or None if not found.
    """
    journal = get_journal(db, journal_id)
    if journal:
        update_data = updated_journal.model_dump(exclude_unset=True, exclude_none=True)
        if "content" in update_data:
            journal.content = update_data["content"]
        if "mood" in update_data:
            journal.mood = update_data["mood"].value
        if update_data:
            journal.is_sync = False
            journal.updated_at = now
        db.commit()
        db.refresh(journal)
        return journal
    return None


def delete_journal(db: Session, journal_id: str) -> Optional[JournalEntry]:
    journal = get_journal(db, journal_id)
    if journal:
        db.delete(journal)
        db.commit()
        return journal
    return None


# Sync bookkeeping
def get_unsynced_journals(db: Session, user_id: str) -> List[JournalEntry]:
    return (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user_id, JournalEntry.is_sync.is_(False))
        .order_by(JournalEntry.created_at.asc())
        .all()
    )


def count_unsynced_journals(db: Session, user_id: str) -> int:
    return (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user_id, JournalEntry.is_sync.is_(False))
        .count()
    )


def mark_journal_synced(db: Session, journal_id: str, mirrored_updated_at: datetime) -> bool:
    """
    Flips `is_sync` on, unless the entry was edited after the mirrored copy was taken.

    Returns:
        bool: True if the flag was set.
    """
    journal = get_journal(db, journal_id)
    if journal is None or journal.updated_at != mirrored_updated_at:
        return False
    journal.is_sync = True
    db.commit()
    return True


def record_journal_mint(
    db: Session,
    journal_id: str,
    nft_address: str,
    transaction_signature: str,
    metadata_uri: str,
    points_awarded: int,
    now: datetime,
) -> Optional[JournalEntry]:
    """
    Marks an entry as minted in a single commit.

    All NFT fields, the minted flag and the points award are written together
    so that no reader can observe a partially minted entry.
    """
    journal = get_journal(db, journal_id)
    if journal is None:
        return None
    journal.is_minted = True
    journal.nft_address = nft_address
    journal.transaction_signature = transaction_signature
    journal.metadata_uri = metadata_uri
    journal.clarity_points = journal.clarity_points + points_awarded
    journal.is_sync = False
    journal.updated_at = now
    db.commit()
    db.refresh(journal)
    return journal


def upsert_journal(db: Session, record: JournalEntryBase) -> JournalEntry:
    """Writes a full entry record as-is, creating the row when missing."""
    journal = get_journal(db, record.id)
    data = record.model_dump()
    data["mood"] = record.mood.value
    if journal:
        for field, value in data.items():
            setattr(journal, field, value)
    else:
        journal = JournalEntry(**data)
        db.add(journal)
    db.commit()
    db.refresh(journal)
    return journal
