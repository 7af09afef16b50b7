"""
Pytest fixtures for MindMint tests.

Both stores run on temporary SQLite files; the wallet, chain and metadata
store are in-memory fakes so no test touches the network.
"""

import asyncio
from contextlib import contextmanager
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, List, Optional, Sequence

import pytest

from mindmint.core.events import EventBus
from mindmint.core.exceptions import CloudMirrorError, WalletNotConnectedError
from mindmint.mint.providers.base import ChainClient, MetadataStore, MintedToken, WalletAdapter
from mindmint.mint.schemas import NFTMetadata
from mindmint.mint.state_machine import MintStateMachine
from mindmint.sync.cloud_mirror import CloudMirror
from mindmint.sync.coordinator import SyncCoordinator
from mindmint.sync.entry_store import EntryStore
from mindmint.users.identity import IdentityStore
from mindmint.users.schemas import UserOut, UserPreferences

OWNER_ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
CREATOR_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class SwitchableMirror(CloudMirror):
    """Cloud mirror on SQLite that can be taken offline."""

    online = True

    @contextmanager
    def _session(self, action: str):
        if not self.online:
            raise CloudMirrorError(f"Failed to {action}: connection refused")
        with super()._session(action) as db:
            yield db


class FakeWallet(WalletAdapter):
    def __init__(self, address: Optional[str] = OWNER_ADDRESS, balance: Decimal = Decimal("1.5")):
        self.address = address
        self.balance = balance
        self.sent: List[Sequence[Any]] = []
        self.airdrops: List[Decimal] = []

    def is_connected(self) -> bool:
        return self.address is not None

    def get_public_address(self) -> str:
        if self.address is None:
            raise WalletNotConnectedError()
        return self.address

    async def get_balance(self) -> Decimal:
        self.get_public_address()
        return self.balance

    async def sign_and_send(self, instructions, extra_signers=()) -> str:
        self.sent.append(instructions)
        return f"sig-{len(self.sent)}"

    async def request_test_funds(self, amount: Decimal) -> str:
        self.get_public_address()
        self.airdrops.append(amount)
        return f"airdrop-{len(self.airdrops)}"


class FakeChain(ChainClient):
    def __init__(self):
        self.tokens: List[MintedToken] = []
        self.error: Optional[BaseException] = None
        self.gate: Optional[asyncio.Event] = None

    async def create_non_fungible_token(self, owner_address: str) -> MintedToken:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        token = MintedToken(mint_address=f"Mint{len(self.tokens) + 1}", signature=f"chain-sig-{len(self.tokens) + 1}")
        self.tokens.append(token)
        return token


class FakeMetadataStore(MetadataStore):
    def __init__(self):
        self.uploads: List[NFTMetadata] = []
        self.error: Optional[BaseException] = None

    async def upload(self, metadata: NFTMetadata) -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append(metadata)
        return f"https://gateway.test/ipfs/meta-{len(self.uploads)}"


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 15, 20, 0, 0))


@pytest.fixture
def local_store(tmp_path, clock):
    return EntryStore.from_url(f"sqlite:///{tmp_path / 'local.db'}", clock=clock)


@pytest.fixture
def cloud_mirror(tmp_path):
    return SwitchableMirror.from_url(f"sqlite:///{tmp_path / 'cloud.db'}")


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def recorded_events(events):
    received = []
    events.subscribe(lambda kind, payload: received.append((kind, payload)))
    return received


@pytest.fixture
def coordinator(local_store, cloud_mirror, events, clock):
    return SyncCoordinator(local_store, mirror=cloud_mirror, events=events, clock=clock)


@pytest.fixture
def local_coordinator(local_store, events, clock):
    return SyncCoordinator(local_store, events=events, clock=clock)


@pytest.fixture
def user(local_store) -> UserOut:
    return local_store.create_user(UserPreferences())


@pytest.fixture
def wallet():
    return FakeWallet()


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def metadata_store():
    return FakeMetadataStore()


@pytest.fixture
def mint_machine(coordinator, wallet, chain, metadata_store):
    return MintStateMachine(
        coordinator,
        wallet,
        chain,
        metadata_store,
        creator_address=CREATOR_ADDRESS,
        image_base_url="https://mindmint.test/journal-image",
    )


@pytest.fixture
def identity(tmp_path):
    return IdentityStore(str(tmp_path / "device_user_id"))


@pytest.fixture
def api_client(coordinator, mint_machine, wallet, identity):
    """FastAPI TestClient wired to the temporary stores and the fakes."""
    from fastapi.testclient import TestClient

    from mindmint.core import dependency
    from mindmint.main import app

    app.dependency_overrides[dependency.get_sync_coordinator] = lambda: coordinator
    app.dependency_overrides[dependency.get_mint_state_machine] = lambda: mint_machine
    app.dependency_overrides[dependency.get_wallet] = lambda: wallet
    app.dependency_overrides[dependency.get_identity_store] = lambda: identity
    yield TestClient(app)
    app.dependency_overrides.clear()


