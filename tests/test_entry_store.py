from datetime import timedelta

import pytest

from mindmint.core.exceptions import EntryNotFoundError, UserNotFoundError
from mindmint.journals.schemas import JournalEntryCreate, JournalEntryUpdate, Mood
from mindmint.users.schemas import UserPreferences, UserUpdate


def test_user_round_trip(local_store):
    preferences = UserPreferences(enable_notifications=False, notification_time="07:45", theme="dark")
    created = local_store.create_user(preferences)

    loaded = local_store.get_user(created.id)
    assert loaded == created
    assert loaded.preferences.theme == "dark"
    assert loaded.total_clarity_points == 0
    assert loaded.wallet_address is None


def test_entry_round_trip(local_store, user):
    created = local_store.create_entry(user.id, JournalEntryCreate(content="  Walked by the river  ", mood=Mood.CALM), 15)

    loaded = local_store.get_entry(created.id)
    assert loaded == created
    assert loaded.content == "Walked by the river"
    assert loaded.mood is Mood.CALM
    assert loaded.clarity_points == 15
    assert loaded.is_minted is False
    assert loaded.is_sync is False
    assert loaded.nft_address is None


def test_entries_listed_newest_first(local_store, user, clock):
    first = local_store.create_entry(user.id, JournalEntryCreate(content="First entry of many", mood=Mood.HAPPY), 10)
    clock.advance(days=1)
    second = local_store.create_entry(user.id, JournalEntryCreate(content="Second entry of many", mood=Mood.SAD), 10)

    assert [e.id for e in local_store.list_entries(user.id)] == [second.id, first.id]
    assert [e.id for e in local_store.list_entries(user.id, limit=1)] == [second.id]


def test_today_entry(local_store, user, clock):
    assert local_store.get_today_entry(user.id) is None
    entry = local_store.create_entry(user.id, JournalEntryCreate(content="Morning pages today", mood=Mood.TIRED), 10)
    assert local_store.get_today_entry(user.id).id == entry.id

    clock.advance(days=1)
    assert local_store.get_today_entry(user.id) is None


def test_entry_for_missing_user_is_rejected(local_store):
    with pytest.raises(UserNotFoundError):
        local_store.create_entry("missing", JournalEntryCreate(content="Nobody owns this one", mood=Mood.CALM), 10)


def test_edit_marks_entry_unsynced(local_store, user, clock):
    entry = local_store.create_entry(user.id, JournalEntryCreate(content="Original text here", mood=Mood.CALM), 10)
    assert local_store.mark_synced(entry)
    assert local_store.get_entry(entry.id).is_sync is True

    clock.advance(minutes=5)
    updated = local_store.update_entry(entry.id, JournalEntryUpdate(content="Edited text here"))
    assert updated.is_sync is False
    assert updated.updated_at == entry.updated_at + timedelta(minutes=5)
    assert updated.created_at == entry.created_at


def test_mark_synced_skips_entries_edited_since_push(local_store, user, clock):
    entry = local_store.create_entry(user.id, JournalEntryCreate(content="Original text here", mood=Mood.CALM), 10)
    clock.advance(seconds=1)
    local_store.update_entry(entry.id, JournalEntryUpdate(mood=Mood.HAPPY))

    assert local_store.mark_synced(entry) is False
    assert local_store.count_unsynced(user.id) == 1


def test_apply_mint_sets_all_fields_together(local_store, user):
    entry = local_store.create_entry(user.id, JournalEntryCreate(content="Worth keeping forever", mood=Mood.GRATEFUL), 30)
    local_store.mark_synced(entry)

    minted = local_store.apply_mint(entry.id, "MintAddress1", "signature1", "https://gateway.test/ipfs/x", 20)
    assert minted.is_minted is True
    assert (minted.nft_address, minted.transaction_signature, minted.metadata_uri) == (
        "MintAddress1",
        "signature1",
        "https://gateway.test/ipfs/x",
    )
    assert minted.clarity_points == 50
    assert minted.is_sync is False


def test_missing_entry_operations(local_store):
    assert local_store.get_entry("missing") is None
    with pytest.raises(EntryNotFoundError):
        local_store.update_entry("missing", JournalEntryUpdate(mood=Mood.SAD))
    with pytest.raises(EntryNotFoundError):
        local_store.delete_entry("missing")
    with pytest.raises(EntryNotFoundError):
        local_store.apply_mint("missing", "a", "b", "c", 20)


def test_update_user(local_store, user):
    updated = local_store.update_user(user.id, UserUpdate(wallet_address="7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"))
    assert updated.wallet_address == "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
    assert updated.current_streak == user.current_streak

    with pytest.raises(UserNotFoundError):
        local_store.update_user("missing", UserUpdate(current_streak=1))


def test_deleting_user_cascades_to_entries(local_store, user):
    entry = local_store.create_entry(user.id, JournalEntryCreate(content="Soon to be gone", mood=Mood.SAD), 10)

    local_store.delete_user(user.id)

    assert local_store.get_user(user.id) is None
    assert local_store.get_entry(entry.id) is None
