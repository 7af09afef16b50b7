from decimal import Decimal

from conftest import OWNER_ADDRESS


def create_journal(client, content="A quiet walk after dinner", mood="calm"):
    response = client.post("/journals", json={"content": content, "mood": mood})
    assert response.status_code == 200, response.text
    return response.json()


def test_device_user_is_created_once(api_client, identity):
    first = api_client.get("/users/me")
    assert first.status_code == 200
    assert identity.load() == first.json()["id"]

    second = api_client.get("/users/me")
    assert second.json()["id"] == first.json()["id"]


def test_journal_crud(api_client):
    created = create_journal(api_client)
    assert created["clarity_points"] == 15
    assert created["is_minted"] is False

    listed = api_client.get("/journals/all")
    assert [j["id"] for j in listed.json()] == [created["id"]]

    today = api_client.get("/journals/today")
    assert today.json()["id"] == created["id"]

    updated = api_client.put(f"/journals/{created['id']}", json={"mood": "happy"})
    assert updated.status_code == 200
    assert updated.json()["mood"] == "happy"

    deleted = api_client.delete(f"/journals/{created['id']}")
    assert deleted.status_code == 200
    assert api_client.get(f"/journals/{created['id']}").status_code == 404


def test_invalid_journal_is_rejected(api_client):
    assert api_client.post("/journals", json={"content": "short", "mood": "calm"}).status_code == 422
    assert api_client.post("/journals", json={"content": "Long enough content", "mood": "bored"}).status_code == 422
    assert api_client.get("/journals/all").json() == []


def test_unknown_journal(api_client):
    assert api_client.get("/journals/missing").status_code == 404
    assert api_client.put("/journals/missing", json={"mood": "sad"}).status_code == 404
    assert api_client.delete("/journals/missing").status_code == 404


def test_other_users_entries_are_hidden(api_client, coordinator, user, local_store):
    from mindmint.journals.schemas import JournalEntryCreate

    foreign = local_store.create_entry(user.id, JournalEntryCreate(content="Not yours to read", mood="sad"), 10)

    assert api_client.get(f"/journals/{foreign.id}").status_code == 404
    assert api_client.post(f"/mint/{foreign.id}").status_code == 404


def test_preferences_wallet_and_insights(api_client):
    prefs = api_client.put("/users/me/preferences", json={"theme": "dark", "notification_time": "07:30"})
    assert prefs.status_code == 200
    assert prefs.json()["preferences"]["theme"] == "dark"
    assert api_client.put("/users/me/preferences", json={"notification_time": "25:00"}).status_code == 422

    wallet = api_client.post("/users/me/wallet", json={"wallet_address": OWNER_ADDRESS})
    assert wallet.json()["wallet_address"] == OWNER_ADDRESS
    assert api_client.delete("/users/me/wallet").json()["wallet_address"] is None

    create_journal(api_client, mood="grateful")
    insights = api_client.get("/users/me/insights").json()
    assert insights["current_streak"] == 1
    assert insights["has_written_today"] is True
    assert insights["mood_distribution"] == {"grateful": 1}


def test_sync_run_and_status(api_client, cloud_mirror):
    cloud_mirror.online = False
    create_journal(api_client)

    status = api_client.get("/sync/status").json()
    assert status["pending_sync"] == 1
    assert status["is_online"] is False

    cloud_mirror.online = True
    report = api_client.post("/sync/run").json()
    assert report["synced"] == 1
    assert report["pending"] == 0

    refreshed = api_client.get("/sync/status", params={"refresh": True}).json()
    assert refreshed["is_online"] is True
    assert refreshed["last_sync_time"] is not None


def test_mint_flow(api_client, chain):
    entry = create_journal(api_client, mood="grateful")

    preview = api_client.get(f"/mint/{entry['id']}/metadata")
    assert preview.status_code == 200
    assert preview.json()["name"] == "MindMint Journal - 2026-03-15"
    assert api_client.get(f"/mint/{entry['id']}/state").json()["state"] == "unminted"

    minted = api_client.post(f"/mint/{entry['id']}")
    assert minted.status_code == 200
    assert minted.json()["nft_address"] == "Mint1"
    assert minted.json()["points_awarded"] == 20

    assert api_client.post(f"/mint/{entry['id']}").status_code == 409
    assert len(chain.tokens) == 1
    assert api_client.get(f"/mint/{entry['id']}/state").json()["state"] == "minted"
    assert api_client.get(f"/journals/{entry['id']}").json()["clarity_points"] == entry["clarity_points"] + 20


def test_mint_failures_map_to_statuses(api_client, chain, wallet):
    from mindmint.core.exceptions import ChainError

    entry = create_journal(api_client)

    chain.error = ChainError("insufficient funds for rent")
    failed = api_client.post(f"/mint/{entry['id']}")
    assert failed.status_code == 502
    assert api_client.get(f"/mint/{entry['id']}/state").json()["state"] == "mint_failed"

    wallet.address = None
    assert api_client.post(f"/mint/{entry['id']}").status_code == 409
    assert api_client.post("/mint/missing").status_code == 404


def test_minting_costs(api_client, wallet):
    costs = api_client.get("/mint/costs").json()
    assert Decimal(str(costs["estimated_cost"])) == Decimal("0.01")
    assert costs["has_enough_sol"] is True

    wallet.address = None
    assert api_client.get("/mint/costs").status_code == 409


def test_wallet_balance_and_airdrop(api_client, wallet):
    balance = api_client.get("/wallet/balance").json()
    assert balance["address"] == OWNER_ADDRESS
    assert Decimal(str(balance["balance"])) == Decimal("1.5")

    airdrop = api_client.post("/wallet/airdrop", json={"amount": "0.5"})
    assert airdrop.status_code == 200
    assert wallet.airdrops == [Decimal("0.5")]
    assert api_client.post("/wallet/airdrop", json={"amount": "5"}).status_code == 422


def test_airdrop_refused_off_test_network(api_client, monkeypatch):
    from mindmint.core import config

    monkeypatch.setattr(config, "SOLANA_NETWORK", "mainnet-beta")
    assert api_client.post("/wallet/airdrop", json={}).status_code == 403
