# mindmint/core/dependency.py
import logging
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from fastapi import Depends

from mindmint.chain.spl_token import SplTokenChainClient
from mindmint.chain.wallet import KeypairWallet
from mindmint.core import config
from mindmint.core.events import EventBus
from mindmint.mint.providers.base import ChainClient, MetadataStore, WalletAdapter
from mindmint.mint.providers.http_metadata import HttpMetadataStore
from mindmint.mint.state_machine import MintStateMachine
from mindmint.sync.cloud_mirror import CloudMirror
from mindmint.sync.coordinator import SyncCoordinator
from mindmint.sync.entry_store import EntryStore
from mindmint.users.identity import IdentityStore
from mindmint.users.schemas import UserPreferences

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_event_bus() -> EventBus:
    return EventBus()


@lru_cache(maxsize=None)
def get_entry_store() -> EntryStore:
    return EntryStore.from_url(config.LOCAL_DATABASE_URL)


@lru_cache(maxsize=None)
def get_cloud_mirror() -> Optional[CloudMirror]:
    if not config.CLOUD_DATABASE_URL:
        logger.info("No CLOUD_DATABASE_URL configured, running local-only")
        return None
    return CloudMirror.from_url(config.CLOUD_DATABASE_URL, connect_timeout=config.CLOUD_CONNECT_TIMEOUT_SECONDS)


@lru_cache(maxsize=None)
def get_sync_coordinator() -> SyncCoordinator:
    return SyncCoordinator(
        get_entry_store(),
        mirror=get_cloud_mirror(),
        events=get_event_bus(),
        points_config=config.get_points_config(),
    )


@lru_cache(maxsize=None)
def get_identity_store() -> IdentityStore:
    return IdentityStore(config.DEVICE_IDENTITY_PATH)


@lru_cache(maxsize=None)
def get_wallet() -> WalletAdapter:
    return KeypairWallet.from_private_key(
        config.SOLANA_RPC_URL, config.WALLET_PRIVATE_KEY, test_network=config.is_test_network()
    )


@lru_cache(maxsize=None)
def get_chain_client() -> ChainClient:
    return SplTokenChainClient(
        config.SOLANA_RPC_URL, get_wallet(), confirm_timeout=config.CHAIN_CONFIRM_TIMEOUT_SECONDS
    )


@lru_cache(maxsize=None)
def get_metadata_store() -> MetadataStore:
    return HttpMetadataStore(
        config.METADATA_UPLOAD_URL,
        config.METADATA_API_KEY,
        config.METADATA_GATEWAY_URL,
        timeout=config.METADATA_UPLOAD_TIMEOUT_SECONDS,
    )


@lru_cache(maxsize=None)
def get_mint_state_machine() -> MintStateMachine:
    return MintStateMachine(
        get_sync_coordinator(),
        get_wallet(),
        get_chain_client(),
        get_metadata_store(),
        points_config=config.get_points_config(),
        creator_address=config.NFT_CREATOR_ADDRESS or None,
        image_base_url=config.NFT_IMAGE_BASE_URL,
        estimated_cost=Decimal(config.MINT_ESTIMATED_COST_SOL),
    )


def default_preferences() -> UserPreferences:
    return UserPreferences(
        enable_notifications=config.DEFAULT_NOTIFICATIONS_ENABLED,
        notification_time=config.DEFAULT_NOTIFICATION_TIME,
    )


async def get_current_user_id(
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    identity: IdentityStore = Depends(get_identity_store),
) -> str:
    """
    FastAPI dependency resolving the device user, created on first launch.
    """
    stored_id = identity.load()
    user = await coordinator.get_or_create_user(stored_id, default_preferences())
    if user.id != stored_id:
        identity.save(user.id)
    return user.id
