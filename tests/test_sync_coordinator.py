import asyncio

import pytest

from mindmint.core.events import EventKind
from mindmint.core.exceptions import (
    EntryNotFoundError,
    EntryValidationError,
    SyncInProgressError,
    UserNotFoundError,
)
from mindmint.journals.schemas import Mood
from mindmint.users.schemas import UserPreferencesUpdate


@pytest.mark.asyncio
async def test_create_entry_awards_points_and_mirrors(coordinator, cloud_mirror, user):
    entry = await coordinator.create_entry(user.id, "  A calm and quiet morning  ", Mood.CALM)

    assert entry.content == "A calm and quiet morning"
    assert entry.clarity_points == 15
    assert entry.is_sync is True
    assert coordinator.store.get_entry(entry.id).is_sync is True

    mirrored = cloud_mirror.get_entry(entry.id)
    assert mirrored.content == entry.content
    assert mirrored.is_sync is True

    owner = coordinator.store.get_user(user.id)
    assert owner.current_streak == 1
    assert owner.total_clarity_points == 15
    assert owner.last_entry_date == entry.created_at


@pytest.mark.asyncio
async def test_streak_bonus_uses_streak_before_the_entry(coordinator, user, clock):
    clock.advance(days=-3)
    points = []
    for day in ("one", "two", "three", "four"):
        entry = await coordinator.create_entry(user.id, f"Day {day} of the habit", Mood.HAPPY)
        points.append(entry.clarity_points)
        clock.advance(days=1)

    # The third entry sees a two day streak; the bonus starts on day four
    assert points == [15, 15, 15, 30]
    owner = coordinator.store.get_user(user.id)
    assert owner.current_streak == 4
    assert owner.longest_streak == 4
    assert owner.total_clarity_points == 75


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "too short", "x" * 5001])
async def test_invalid_content_is_rejected_before_storage(coordinator, user, content):
    with pytest.raises(EntryValidationError):
        await coordinator.create_entry(user.id, content, Mood.CALM)
    assert coordinator.store.list_entries(user.id) == []


@pytest.mark.asyncio
async def test_unknown_mood_is_rejected(coordinator, user):
    with pytest.raises(EntryValidationError):
        await coordinator.create_entry(user.id, "A perfectly fine entry", "bored")


@pytest.mark.asyncio
async def test_create_entry_for_unknown_user(coordinator):
    with pytest.raises(UserNotFoundError):
        await coordinator.create_entry("missing", "A perfectly fine entry", Mood.CALM)


@pytest.mark.asyncio
async def test_writes_succeed_while_mirror_is_down(coordinator, cloud_mirror, user):
    cloud_mirror.online = False

    entry = await coordinator.create_entry(user.id, "Written on a plane", Mood.EXCITED)

    assert entry.is_sync is False
    assert coordinator.store.get_entry(entry.id).is_sync is False
    status = await coordinator.get_sync_status(user.id)
    assert status.is_online is False
    assert status.pending_sync == 1


@pytest.mark.asyncio
async def test_sync_with_unreachable_mirror_keeps_flags_and_does_not_raise(coordinator, cloud_mirror, user):
    cloud_mirror.online = False
    await coordinator.create_entry(user.id, "First offline entry", Mood.CALM)
    await coordinator.create_entry(user.id, "Second offline entry", Mood.SAD)

    report = await coordinator.sync_to_cloud(user.id)

    assert report.attempted == 2
    assert report.failed == 2
    assert report.synced == 0
    assert report.pending == 2
    assert all(not e.is_sync for e in coordinator.store.list_entries(user.id))


@pytest.mark.asyncio
async def test_offline_sweep_does_not_record_a_sync_time(coordinator, cloud_mirror, user):
    cloud_mirror.online = False

    report = await coordinator.sync_to_cloud(user.id)

    assert (report.attempted, report.failed, report.pending) == (0, 0, 0)
    status = await coordinator.get_sync_status(user.id)
    assert status.is_online is False
    assert status.last_sync_time is None


@pytest.mark.asyncio
async def test_sync_pushes_pending_entries_once_back_online(coordinator, cloud_mirror, user):
    cloud_mirror.online = False
    entry = await coordinator.create_entry(user.id, "Catching up later", Mood.TIRED)

    cloud_mirror.online = True
    report = await coordinator.sync_to_cloud(user.id)

    assert (report.attempted, report.synced, report.failed, report.pending) == (1, 1, 0, 0)
    assert coordinator.store.get_entry(entry.id).is_sync is True
    assert cloud_mirror.get_entry(entry.id) is not None
    status = await coordinator.get_sync_status(user.id)
    assert status.is_online is True
    assert status.last_sync_time is not None

    again = await coordinator.sync_to_cloud(user.id)
    assert again.attempted == 0


@pytest.mark.asyncio
async def test_concurrent_sync_is_rejected(coordinator, user):
    async def overlapping():
        # The first sweep claims the user before its first await
        first = asyncio.ensure_future(coordinator.sync_to_cloud(user.id))
        await asyncio.sleep(0)
        assert coordinator.is_syncing(user.id)
        with pytest.raises(SyncInProgressError):
            await coordinator.sync_to_cloud(user.id)
        return await first

    await coordinator.create_entry(user.id, "Something to push", Mood.CALM)
    report = await overlapping()
    assert report.failed == 0
    assert not coordinator.is_syncing(user.id)


@pytest.mark.asyncio
async def test_editing_synced_entry_flips_sync_flag(coordinator, cloud_mirror, user):
    entry = await coordinator.create_entry(user.id, "Before the edit", Mood.CALM)
    assert entry.is_sync is True

    cloud_mirror.online = False
    edited = await coordinator.update_entry(entry.id, content="After the edit happened")

    assert edited.is_sync is False
    assert coordinator.store.get_entry(entry.id).is_sync is False


@pytest.mark.asyncio
async def test_edit_is_remirrored_when_online(coordinator, cloud_mirror, user):
    entry = await coordinator.create_entry(user.id, "Before the edit", Mood.CALM)

    edited = await coordinator.update_entry(entry.id, mood=Mood.HAPPY)

    assert edited.is_sync is True
    assert cloud_mirror.get_entry(entry.id).mood is Mood.HAPPY
    assert edited.clarity_points == entry.clarity_points


@pytest.mark.asyncio
async def test_update_validation_and_missing_entry(coordinator, user):
    entry = await coordinator.create_entry(user.id, "Valid entry content", Mood.CALM)
    with pytest.raises(EntryValidationError):
        await coordinator.update_entry(entry.id, content="short")
    with pytest.raises(EntryNotFoundError):
        await coordinator.update_entry("missing", mood=Mood.SAD)


@pytest.mark.asyncio
async def test_reads_fall_back_to_local_store(coordinator, cloud_mirror, user):
    cloud_mirror.online = False
    entry = await coordinator.create_entry(user.id, "Only stored locally", Mood.CALM)

    entries = await coordinator.get_journal_entries(user.id)
    assert [e.id for e in entries] == [entry.id]
    assert (await coordinator.get_user(user.id)).id == user.id
    assert (await coordinator.get_journal_entry(entry.id)).id == entry.id


@pytest.mark.asyncio
async def test_reads_prefer_the_mirror(coordinator, cloud_mirror, user):
    cloud_mirror.online = False
    local_only = await coordinator.create_entry(user.id, "Not mirrored yet", Mood.CALM)
    cloud_mirror.online = True

    mirrored = await coordinator.create_entry(user.id, "Mirrored right away", Mood.HAPPY)

    assert [e.id for e in await coordinator.get_journal_entries(user.id)] == [mirrored.id]
    local = await coordinator.get_journal_entries(user.id, local_only=True)
    assert {e.id for e in local} == {local_only.id, mirrored.id}


@pytest.mark.asyncio
async def test_delete_entry_refreshes_stats_and_mirror(coordinator, cloud_mirror, user):
    entry = await coordinator.create_entry(user.id, "Going to delete this", Mood.ANGRY)

    await coordinator.delete_entry(entry.id)

    assert coordinator.store.get_entry(entry.id) is None
    assert cloud_mirror.get_entry(entry.id) is None
    owner = coordinator.store.get_user(user.id)
    assert owner.total_clarity_points == 0
    assert owner.current_streak == 0
    assert owner.longest_streak == 1


@pytest.mark.asyncio
async def test_delete_survives_mirror_outage(coordinator, cloud_mirror, user):
    entry = await coordinator.create_entry(user.id, "Going to delete this", Mood.ANGRY)
    cloud_mirror.online = False

    await coordinator.delete_entry(entry.id)

    assert coordinator.store.get_entry(entry.id) is None


@pytest.mark.asyncio
async def test_local_only_coordinator(local_coordinator, user):
    entry = await local_coordinator.create_entry(user.id, "No cloud configured", Mood.CALM)

    assert entry.is_sync is False
    assert await local_coordinator.check_online_status() is False
    report = await local_coordinator.sync_to_cloud(user.id)
    assert (report.attempted, report.pending) == (0, 1)


@pytest.mark.asyncio
async def test_get_or_create_user(coordinator, cloud_mirror):
    created = await coordinator.get_or_create_user()
    assert cloud_mirror.get_user(created.id) is not None

    again = await coordinator.get_or_create_user(created.id)
    assert again.id == created.id

    restored = await coordinator.get_or_create_user("lost-device-id")
    assert restored.id == "lost-device-id"


@pytest.mark.asyncio
async def test_preferences_and_wallet(coordinator, cloud_mirror, user):
    updated = await coordinator.update_preferences(user.id, UserPreferencesUpdate(theme="dark"))
    assert updated.preferences.theme == "dark"
    assert updated.preferences.notification_time == user.preferences.notification_time

    connected = await coordinator.connect_wallet(user.id, "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU")
    assert cloud_mirror.get_user(user.id).wallet_address == connected.wallet_address

    disconnected = await coordinator.disconnect_wallet(user.id)
    assert disconnected.wallet_address is None


@pytest.mark.asyncio
async def test_today_entry_and_insights(coordinator, user, clock):
    assert await coordinator.get_today_entry(user.id) is None
    clock.advance(days=-1)
    await coordinator.create_entry(user.id, "Yesterday's reflection", Mood.SAD)
    clock.advance(days=1)
    today = await coordinator.create_entry(user.id, "Today's reflection", Mood.HAPPY)

    assert (await coordinator.get_today_entry(user.id)).id == today.id
    insights = await coordinator.get_insights(user.id)
    assert insights.current_streak == 2
    assert insights.has_written_today is True
    assert insights.mood_distribution == {"sad": 1, "happy": 1}
    assert [p.mood for p in insights.weekly_moods] == ["sad", "happy"]


@pytest.mark.asyncio
async def test_events_are_published(coordinator, recorded_events, cloud_mirror, user):
    entry = await coordinator.create_entry(user.id, "Something happened", Mood.EXCITED)
    cloud_mirror.online = False
    await coordinator.update_entry(entry.id, mood=Mood.CALM)
    await coordinator.delete_entry(entry.id)

    kinds = [kind for kind, _ in recorded_events]
    assert EventKind.ENTRY_CREATED in kinds
    assert EventKind.ENTRY_UPDATED in kinds
    assert EventKind.ENTRY_DELETED in kinds
    assert EventKind.USER_UPDATED in kinds
    assert EventKind.SYNC_STATUS_CHANGED in kinds
