"""
Best-effort remote replica of the local schema.

The mirror is never authoritative. Every failure is raised as
`CloudMirrorError` so callers can degrade to "stays unsynced".
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from mindmint.core.database import build_engine, build_session_factory, init_db
from mindmint.core.exceptions import CloudMirrorError
from mindmint.journals import db as journals_db
from mindmint.journals.schemas import JournalEntryBase
from mindmint.users import db as users_db
from mindmint.users.schemas import UserOut

logger = logging.getLogger(__name__)


class CloudMirror:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, url: str, connect_timeout: Optional[int] = None) -> "CloudMirror":
        """
        Builds a mirror for a remote database URL.

        Table creation is attempted once; an unreachable server is logged and
        left for later calls to report.
        """
        engine = build_engine(url, connect_timeout=connect_timeout)
        try:
            init_db(engine)
        except SQLAlchemyError as e:
            logger.warning(f"Cloud mirror unreachable at startup: {e}")
        return cls(build_session_factory(engine))

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            db = self._session_factory()
        except SQLAlchemyError as e:
            raise CloudMirrorError(f"Failed to {action}: {e}") from e
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            raise CloudMirrorError(f"Failed to {action}: {e}", side_effect_possible=True) from e
        finally:
            db.close()

    def ping(self) -> None:
        with self._session("reach cloud mirror") as db:
            db.execute(text("SELECT 1"))

    def push_user(self, user: UserOut) -> None:
        with self._session(f"mirror user {user.id}") as db:
            users_db.upsert_user(db, user)

    def push_entry(self, entry: JournalEntryBase, owner: UserOut) -> None:
        """Upserts the owning user and the entry; mirrored rows always carry `is_sync=True`."""
        with self._session(f"mirror entry {entry.id}") as db:
            if users_db.get_user(db, owner.id) is None:
                users_db.upsert_user(db, owner)
            journals_db.upsert_journal(db, entry.model_copy(update={"is_sync": True}))

    def remove_entry(self, entry_id: str) -> None:
        with self._session(f"remove mirrored entry {entry_id}") as db:
            journals_db.delete_journal(db, entry_id)

    def get_user(self, user_id: str) -> Optional[UserOut]:
        with self._session(f"load mirrored user {user_id}") as db:
            user = users_db.get_user(db, user_id)
            return UserOut.model_validate(user) if user else None

    def get_entry(self, entry_id: str) -> Optional[JournalEntryBase]:
        with self._session(f"load mirrored entry {entry_id}") as db:
            entry = journals_db.get_journal(db, entry_id)
            return JournalEntryBase.model_validate(entry) if entry else None

    def list_entries(self, user_id: str, limit: Optional[int] = None) -> List[JournalEntryBase]:
        with self._session(f"list mirrored entries for {user_id}") as db:
            return [JournalEntryBase.model_validate(e) for e in journals_db.get_user_journals(db, user_id, limit)]
