from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session
from mindmint.users.models import User
from mindmint.users.schemas import UserOut, UserPreferences, UserUpdate


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, user_id: str, preferences: UserPreferences, now: datetime) -> User:
    new_user = User(
        id=user_id,
        wallet_address=None,
        total_clarity_points=0,
        current_streak=0,
        longest_streak=0,
        last_entry_date=None,
        created_at=now,
        updated_at=now,
        preferences=preferences.model_dump(),
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user


def update_user(db: Session, user_id: str, updated_user: UserUpdate, now: datetime) -> Optional[User]:
    user = get_user(db, user_id)
    if user:
        update_data = updated_user.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(user, field, value)
        user.updated_at = now
        db.commit()
        db.refresh(user)
        return user
    return None


def upsert_user(db: Session, record: UserOut) -> User:
    """Writes a full user record as-is, creating the row when missing."""
    user = get_user(db, record.id)
    data = record.model_dump()
    if user:
        for field, value in data.items():
            setattr(user, field, value)
    else:
        user = User(**data)
        db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: str) -> Optional[User]:
    user = get_user(db, user_id)
    if user:
        db.delete(user)
        db.commit()
        return user
    return None
