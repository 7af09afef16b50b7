"""
Single read/write facade over the local store and the optional cloud mirror.

Writes are applied to the local store first and fail with it. The mirror is
then tried best-effort: a mirror failure is logged and leaves the record
unsynced, it never fails the write.

Reads prefer the mirror when one is configured, since it may hold a more
complete cross-device view, and fall back to the local store on any mirror
error. An entry written only locally can be shadowed by an older mirrored copy
until the next sweep. Pass ``local_only=True`` where a read must reflect the
local store.
"""

import asyncio
import logging
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Callable, List, Optional, Set

from pydantic import ValidationError

from mindmint.core.events import EventBus, EventKind
from mindmint.core.exceptions import (
    CloudMirrorError,
    EntryValidationError,
    StorageError,
    SyncInProgressError,
    UserNotFoundError,
)
from mindmint.journals.schemas import JournalEntryBase, JournalEntryCreate, JournalEntryUpdate, Mood
from mindmint.ledger.engine import (
    DEFAULT_POINTS_CONFIG,
    compute_clarity_points,
    compute_streak,
    compute_user_stats,
    get_mood_distribution,
    get_streak_message,
    get_weekly_mood_data,
    has_written_today,
)
from mindmint.ledger.schemas import PointsConfig
from mindmint.sync.cloud_mirror import CloudMirror
from mindmint.sync.entry_store import EntryStore
from mindmint.sync.schemas import SyncReport, SyncStatus
from mindmint.users.schemas import (
    UserInsights,
    UserOut,
    UserPreferences,
    UserPreferencesUpdate,
    UserUpdate,
)

logger = logging.getLogger(__name__)


def _validation_message(error: ValidationError) -> str:
    messages = []
    for detail in error.errors():
        message = detail["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(message)
    return "; ".join(messages)


class SyncCoordinator:
    def __init__(
        self,
        store: EntryStore,
        mirror: Optional[CloudMirror] = None,
        events: Optional[EventBus] = None,
        points_config: PointsConfig = DEFAULT_POINTS_CONFIG,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.mirror = mirror
        self.events = events or EventBus()
        self.points_config = points_config
        self._clock = clock
        self._is_online = mirror is not None
        self._last_sync_time: Optional[datetime] = None
        self._syncing: Set[str] = set()

    # Mirror plumbing
    def _set_online(self, online: bool) -> None:
        if online != self._is_online:
            self._is_online = online
            self.events.publish(EventKind.SYNC_STATUS_CHANGED, is_online=online)

    async def _call_mirror(self, func: Callable[..., Any], *args: Any) -> Any:
        # Mirror calls block on the network, keep them off the event loop
        try:
            result = await asyncio.to_thread(func, *args)
        except CloudMirrorError:
            self._set_online(False)
            raise
        self._set_online(True)
        return result

    async def _mirror_user(self, user: UserOut) -> None:
        if self.mirror is None:
            return
        try:
            await self._call_mirror(self.mirror.push_user, user)
        except CloudMirrorError as e:
            logger.warning(f"User {user.id} not mirrored: {e}")

    async def _mirror_entry(self, entry: JournalEntryBase, owner: UserOut) -> JournalEntryBase:
        """
        Pushes one entry to the mirror and flags it synced locally on success.

        Returns:
            JournalEntryBase: The local record, with `is_sync` reflecting the outcome.
        """
        if self.mirror is None:
            return entry
        try:
            await self._call_mirror(self.mirror.push_entry, entry, owner)
        except CloudMirrorError as e:
            logger.warning(f"Entry {entry.id} stays unsynced: {e}")
            return entry
        if self.store.mark_synced(entry):
            return entry.model_copy(update={"is_sync": True})
        return entry

    def _require_user(self, user_id: str) -> UserOut:
        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # Users
    async def create_user(
        self, preferences: Optional[UserPreferences] = None, user_id: Optional[str] = None
    ) -> UserOut:
        user = self.store.create_user(preferences or UserPreferences(), user_id=user_id)
        logger.info(f"Created user {user.id}")
        await self._mirror_user(user)
        self.events.publish(EventKind.USER_UPDATED, user=user)
        return user

    async def get_or_create_user(
        self, user_id: Optional[str] = None, preferences: Optional[UserPreferences] = None
    ) -> UserOut:
        """
        Loads the device user, creating it on first launch.

        The local store is the authority for identity: a stored id missing
        locally is recreated under the same id.
        """
        if user_id:
            user = self.store.get_user(user_id)
            if user is not None:
                return user
        return await self.create_user(preferences, user_id=user_id)

    async def get_user(self, user_id: str, local_only: bool = False) -> Optional[UserOut]:
        if self.mirror is not None and not local_only:
            try:
                remote = await self._call_mirror(self.mirror.get_user, user_id)
                if remote is not None:
                    return remote
            except CloudMirrorError as e:
                logger.warning(f"Reading user {user_id} from local store: {e}")
        return self.store.get_user(user_id)

    async def update_user(self, user_id: str, updates: UserUpdate) -> UserOut:
        user = self.store.update_user(user_id, updates)
        await self._mirror_user(user)
        self.events.publish(EventKind.USER_UPDATED, user=user)
        return user

    async def update_preferences(self, user_id: str, updates: UserPreferencesUpdate) -> UserOut:
        user = self._require_user(user_id)
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        preferences = user.preferences.model_copy(update=changes)
        return await self.update_user(user_id, UserUpdate(preferences=preferences))

    async def connect_wallet(self, user_id: str, wallet_address: str) -> UserOut:
        user = await self.update_user(user_id, UserUpdate(wallet_address=wallet_address))
        logger.info(f"Wallet {wallet_address} connected for user {user_id}")
        return user

    async def disconnect_wallet(self, user_id: str) -> UserOut:
        return await self.update_user(user_id, UserUpdate(wallet_address=None))

    async def refresh_user_stats(self, user_id: str) -> UserOut:
        """
        Reconciles the cached streak and point totals with the entry history.

        Args:
            user_id (str): ID of the user.

        Returns:
            UserOut: The updated user.
        """
        user = self._require_user(user_id)
        entries = self.store.list_entries(user_id)
        stats = compute_user_stats(entries, user.longest_streak, self._clock())
        return await self.update_user(user_id, UserUpdate(**stats.model_dump()))

    async def get_insights(self, user_id: str) -> UserInsights:
        user = self._require_user(user_id)
        entries = self.store.list_entries(user_id)
        now = self._clock()
        streak = compute_streak(entries, now)
        return UserInsights(
            current_streak=streak,
            longest_streak=max(user.longest_streak, streak),
            total_clarity_points=user.total_clarity_points,
            has_written_today=has_written_today(entries, now),
            streak_message=get_streak_message(streak),
            mood_distribution=get_mood_distribution(entries),
            weekly_moods=get_weekly_mood_data(entries, now),
        )

    # Journal entries
    async def get_journal_entries(
        self, user_id: str, limit: Optional[int] = None, local_only: bool = False
    ) -> List[JournalEntryBase]:
        if self.mirror is not None and not local_only:
            try:
                return await self._call_mirror(self.mirror.list_entries, user_id, limit)
            except CloudMirrorError as e:
                logger.warning(f"Reading entries of {user_id} from local store: {e}")
        return self.store.list_entries(user_id, limit)

    async def get_journal_entry(self, entry_id: str, local_only: bool = False) -> Optional[JournalEntryBase]:
        if self.mirror is not None and not local_only:
            try:
                remote = await self._call_mirror(self.mirror.get_entry, entry_id)
                if remote is not None:
                    return remote
            except CloudMirrorError as e:
                logger.warning(f"Reading entry {entry_id} from local store: {e}")
        return self.store.get_entry(entry_id)

    async def get_today_entry(self, user_id: str) -> Optional[JournalEntryBase]:
        return self.store.get_today_entry(user_id, self._clock())

    async def create_entry(self, user_id: str, content: str, mood: Mood) -> JournalEntryBase:
        """
        Validates and stores a new entry, snapshotting its clarity points.

        The streak bonus is based on the streak before this entry, so a
        bonus band is reached on the entry after the threshold day.

        Args:
            user_id (str): ID of the author.
            content (str): Entry text, trimmed before validation.
            mood (Mood): Tracked mood.

        Returns:
            JournalEntryBase: The stored entry.

        Raises:
            EntryValidationError: If the content or mood is invalid.
            UserNotFoundError: If the author does not exist.
        """
        try:
            journal = JournalEntryCreate(content=content, mood=mood)
        except ValidationError as e:
            raise EntryValidationError(_validation_message(e)) from e

        self._require_user(user_id)
        now = self._clock()
        draft = SimpleNamespace(created_at=now, mood=journal.mood, is_minted=False, clarity_points=0)
        streak = compute_streak(self.store.list_entries(user_id), now)
        points = compute_clarity_points(draft, streak, mood_tracked=True, config=self.points_config)

        entry = self.store.create_entry(user_id, journal, points.total)
        logger.info(f"Entry {entry.id} created for user {user_id} with {points.total} points")
        owner = await self.refresh_user_stats(user_id)
        entry = await self._mirror_entry(entry, owner)
        self.events.publish(EventKind.ENTRY_CREATED, entry=entry)
        return entry

    async def update_entry(
        self, entry_id: str, content: Optional[str] = None, mood: Optional[Mood] = None
    ) -> JournalEntryBase:
        try:
            updates = JournalEntryUpdate(content=content, mood=mood)
        except ValidationError as e:
            raise EntryValidationError(_validation_message(e)) from e

        entry = self.store.update_entry(entry_id, updates)
        owner = self._require_user(entry.user_id)
        entry = await self._mirror_entry(entry, owner)
        self.events.publish(EventKind.ENTRY_UPDATED, entry=entry)
        return entry

    async def delete_entry(self, entry_id: str) -> JournalEntryBase:
        entry = self.store.delete_entry(entry_id)
        logger.info(f"Entry {entry_id} deleted")
        await self.refresh_user_stats(entry.user_id)
        if self.mirror is not None:
            try:
                await self._call_mirror(self.mirror.remove_entry, entry_id)
            except CloudMirrorError as e:
                logger.warning(f"Mirrored copy of entry {entry_id} not removed: {e}")
        self.events.publish(EventKind.ENTRY_DELETED, entry=entry)
        return entry

    async def record_mint(
        self,
        entry_id: str,
        nft_address: str,
        transaction_signature: str,
        metadata_uri: str,
        points_awarded: int,
    ) -> JournalEntryBase:
        """
        Persists a completed mint and its point award.

        The local write is a single transaction and must succeed. Refreshing
        the cached user totals and mirroring are best-effort afterwards, since
        the mint itself is already recorded.
        """
        entry = self.store.apply_mint(entry_id, nft_address, transaction_signature, metadata_uri, points_awarded)
        try:
            owner = await self.refresh_user_stats(entry.user_id)
            entry = await self._mirror_entry(entry, owner)
        except StorageError as e:
            logger.error(f"Minted entry {entry_id} recorded, follow-up writes failed: {e}")
        self.events.publish(EventKind.ENTRY_UPDATED, entry=entry)
        return entry

    # Sync
    async def sync_to_cloud(self, user_id: str) -> SyncReport:
        """
        Pushes every unsynced entry of a user to the mirror.

        A failed push leaves the entry unsynced and the sweep moves on. Mirror
        errors are never raised. Only one sweep per user may run at a time.

        Raises:
            SyncInProgressError: If a sweep for this user is already running.
            UserNotFoundError: If the user does not exist.
        """
        if user_id in self._syncing:
            raise SyncInProgressError(user_id)
        self._syncing.add(user_id)
        try:
            report = await self._sweep(user_id)
        finally:
            self._syncing.discard(user_id)

        logger.info(
            f"Sync for {user_id}: {report.synced}/{report.attempted} synced, "
            f"{report.failed} failed, {report.pending} pending"
        )
        self.events.publish(EventKind.SYNC_STATUS_CHANGED, report=report)
        return report

    async def _sweep(self, user_id: str) -> SyncReport:
        owner = self._require_user(user_id)
        report = SyncReport()
        if self.mirror is None:
            report.pending = self.store.count_unsynced(user_id)
            return report

        await self._mirror_user(owner)
        for entry in self.store.list_unsynced_entries(user_id):
            report.attempted += 1
            try:
                await self._call_mirror(self.mirror.push_entry, entry, owner)
            except CloudMirrorError as e:
                report.failed += 1
                logger.warning(f"Entry {entry.id} stays unsynced: {e}")
                continue
            # An edit made while the push was in flight keeps the entry pending
            if self.store.mark_synced(entry):
                report.synced += 1

        report.pending = self.store.count_unsynced(user_id)
        # The user push runs first, so an unreachable mirror is known here
        if report.failed == 0 and self._is_online:
            self._last_sync_time = self._clock()
        return report

    def is_syncing(self, user_id: str) -> bool:
        return user_id in self._syncing

    async def check_online_status(self) -> bool:
        if self.mirror is None:
            return False
        try:
            await self._call_mirror(self.mirror.ping)
        except CloudMirrorError as e:
            logger.warning(f"Cloud mirror offline: {e}")
            return False
        return True

    async def get_sync_status(self, user_id: str) -> SyncStatus:
        return SyncStatus(
            is_online=self._is_online,
            last_sync_time=self._last_sync_time,
            pending_sync=self.store.count_unsynced(user_id),
        )
