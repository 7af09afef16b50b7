"""
Authoritative on-device store for users and journal entries.

Every write must succeed here or the calling operation fails: database errors
are raised as `StorageError`, never swallowed.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from mindmint.core.database import build_engine, build_session_factory, init_db
from mindmint.core.exceptions import EntryNotFoundError, StorageError, UserNotFoundError
from mindmint.journals import db as journals_db
from mindmint.journals.schemas import JournalEntryBase, JournalEntryCreate, JournalEntryUpdate
from mindmint.users import db as users_db
from mindmint.users.schemas import UserOut, UserPreferences, UserUpdate

logger = logging.getLogger(__name__)


class EntryStore:
    def __init__(self, session_factory: sessionmaker, clock: Callable[[], datetime] = datetime.now):
        self._session_factory = session_factory
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, clock: Callable[[], datetime] = datetime.now) -> "EntryStore":
        engine = build_engine(url)
        init_db(engine)
        logger.info(f"Local store ready at {engine.url.render_as_string(hide_password=True)}")
        return cls(build_session_factory(engine), clock=clock)

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Local store failed to {action}: {e}")
            raise StorageError(f"Failed to {action}") from e
        finally:
            db.close()

    # Users
    def create_user(self, preferences: UserPreferences, user_id: Optional[str] = None) -> UserOut:
        with self._session("create user") as db:
            user = users_db.create_user(db, user_id or str(uuid.uuid4()), preferences, self._clock())
            return UserOut.model_validate(user)

    def get_user(self, user_id: str) -> Optional[UserOut]:
        with self._session("load user") as db:
            user = users_db.get_user(db, user_id)
            return UserOut.model_validate(user) if user else None

    def update_user(self, user_id: str, updates: UserUpdate) -> UserOut:
        with self._session("update user") as db:
            user = users_db.update_user(db, user_id, updates, self._clock())
            if user is None:
                raise UserNotFoundError(user_id)
            return UserOut.model_validate(user)

    def delete_user(self, user_id: str) -> None:
        with self._session("delete user") as db:
            if users_db.delete_user(db, user_id) is None:
                raise UserNotFoundError(user_id)

    # Journal entries
    def create_entry(self, user_id: str, journal: JournalEntryCreate, clarity_points: int) -> JournalEntryBase:
        with self._session("create journal entry") as db:
            if users_db.get_user(db, user_id) is None:
                raise UserNotFoundError(user_id)
            entry = journals_db.create_journal(
                db, str(uuid.uuid4()), journal, user_id, clarity_points, self._clock()
            )
            return JournalEntryBase.model_validate(entry)

    def get_entry(self, entry_id: str) -> Optional[JournalEntryBase]:
        with self._session("load journal entry") as db:
            entry = journals_db.get_journal(db, entry_id)
            return JournalEntryBase.model_validate(entry) if entry else None

    def list_entries(self, user_id: str, limit: Optional[int] = None) -> List[JournalEntryBase]:
        with self._session("list journal entries") as db:
            return [JournalEntryBase.model_validate(e) for e in journals_db.get_user_journals(db, user_id, limit)]

    def get_entry_for_day(self, user_id: str, day: date) -> Optional[JournalEntryBase]:
        with self._session("load today's entry") as db:
            entry = journals_db.get_day_journal(db, user_id, day)
            return JournalEntryBase.model_validate(entry) if entry else None

    def update_entry(self, entry_id: str, updates: JournalEntryUpdate) -> JournalEntryBase:
        with self._session("update journal entry") as db:
            entry = journals_db.update_journal(db, entry_id, updates, self._clock())
            if entry is None:
                raise EntryNotFoundError(entry_id)
            return JournalEntryBase.model_validate(entry)

    def delete_entry(self, entry_id: str) -> JournalEntryBase:
        with self._session("delete journal entry") as db:
            entry = journals_db.delete_journal(db, entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)
            return JournalEntryBase.model_validate(entry)

    def apply_mint(
        self,
        entry_id: str,
        nft_address: str,
        transaction_signature: str,
        metadata_uri: str,
        points_awarded: int,
    ) -> JournalEntryBase:
        with self._session("record mint") as db:
            entry = journals_db.record_journal_mint(
                db, entry_id, nft_address, transaction_signature, metadata_uri, points_awarded, self._clock()
            )
            if entry is None:
                raise EntryNotFoundError(entry_id)
            return JournalEntryBase.model_validate(entry)

    # Sync bookkeeping
    def list_unsynced_entries(self, user_id: str) -> List[JournalEntryBase]:
        with self._session("list unsynced entries") as db:
            return [JournalEntryBase.model_validate(e) for e in journals_db.get_unsynced_journals(db, user_id)]

    def count_unsynced(self, user_id: str) -> int:
        with self._session("count unsynced entries") as db:
            return journals_db.count_unsynced_journals(db, user_id)

    def mark_synced(self, entry: JournalEntryBase) -> bool:
        with self._session("mark entry synced") as db:
            return journals_db.mark_journal_synced(db, entry.id, entry.updated_at)

    def get_today_entry(self, user_id: str, as_of: Optional[datetime] = None) -> Optional[JournalEntryBase]:
        return self.get_entry_for_day(user_id, (as_of or self._clock()).date())
