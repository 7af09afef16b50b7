"""
Mints a journal entry into a single non-fungible token, at most once.

An entry moves UNMINTED -> MINTING -> MINTED or MINT_FAILED. MINT_FAILED
behaves like UNMINTED: the caller may try again, nothing retries on its own.
The chain call is not idempotent (every call allocates a new mint address), so
a second attempt on an entry whose mint is still in flight is rejected rather
than queued.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Set, Tuple

from mindmint.core.events import EventKind
from mindmint.core.exceptions import (
    AlreadyMintedError,
    ChainError,
    CollaboratorError,
    EntryNotFoundError,
    EntryValidationError,
    MetadataStoreError,
    MintInProgressError,
    MintPersistenceError,
    NotFoundError,
    StorageError,
    WalletNotConnectedError,
)
from mindmint.journals.schemas import JournalEntryBase
from mindmint.ledger.engine import DEFAULT_POINTS_CONFIG, compute_clarity_points
from mindmint.ledger.schemas import PointsConfig
from mindmint.mint.metadata import build_nft_metadata
from mindmint.mint.providers.base import ChainClient, MetadataStore, MintedToken, WalletAdapter
from mindmint.mint.schemas import MintCostEstimate, MintResult, MintState, MintStateOut, NFTMetadata
from mindmint.sync.coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


class MintStateMachine:
    def __init__(
        self,
        coordinator: SyncCoordinator,
        wallet: WalletAdapter,
        chain: ChainClient,
        metadata_store: MetadataStore,
        points_config: PointsConfig = DEFAULT_POINTS_CONFIG,
        creator_address: Optional[str] = None,
        image_base_url: str = "",
        estimated_cost: Decimal = Decimal("0.01"),
    ):
        self.coordinator = coordinator
        self.wallet = wallet
        self.chain = chain
        self.metadata_store = metadata_store
        self.points_config = points_config
        self.creator_address = creator_address
        self.image_base_url = image_base_url
        self.estimated_cost = estimated_cost
        self._in_flight: Set[str] = set()
        self._failures: Dict[str, str] = {}
        coordinator.events.subscribe(self._on_event)

    def _on_event(self, kind: EventKind, payload: Dict[str, Any]) -> None:
        if kind is EventKind.ENTRY_DELETED:
            self._failures.pop(payload["entry"].id, None)

    def _publish(self, entry_id: str, state: MintState, error: Optional[str] = None) -> None:
        self.coordinator.events.publish(EventKind.MINT_STATE_CHANGED, entry_id=entry_id, state=state, error=error)

    def _fail(self, entry_id: str, error: Exception) -> None:
        self._failures[entry_id] = str(error)
        logger.error(f"Mint of entry {entry_id} failed: {error}")
        self._publish(entry_id, MintState.MINT_FAILED, str(error))

    async def _load_entry(self, entry_id: str) -> JournalEntryBase:
        entry = await self.coordinator.get_journal_entry(entry_id, local_only=True)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def _owner_address(self) -> str:
        if not self.wallet.is_connected():
            raise WalletNotConnectedError()
        return self.wallet.get_public_address()

    def build_metadata(self, entry: JournalEntryBase, owner_address: str) -> NFTMetadata:
        return build_nft_metadata(
            entry,
            owner_address,
            creator_address=self.creator_address,
            image_base_url=self.image_base_url,
        )

    async def mint_entry(self, entry_id: str) -> MintResult:
        """
        Mints one entry and records the token and its point award.

        Args:
            entry_id (str): ID of the entry to mint.

        Returns:
            MintResult: Token address, signature, metadata URI and points awarded.

        Raises:
            MintInProgressError: If a mint of this entry is already running.
            EntryNotFoundError: If the entry does not exist.
            AlreadyMintedError: If the entry was minted before.
            WalletNotConnectedError: If no wallet is connected.
            CollaboratorError: If the metadata store, wallet or chain failed.
            MintPersistenceError: If the token was created but could not be recorded.
        """
        # Claimed before the first await so a concurrent call sees it
        if entry_id in self._in_flight:
            raise MintInProgressError(entry_id)
        self._in_flight.add(entry_id)
        try:
            return await self._mint(entry_id)
        finally:
            self._in_flight.discard(entry_id)

    async def _mint(self, entry_id: str) -> MintResult:
        entry = await self._load_entry(entry_id)
        if entry.is_minted:
            raise AlreadyMintedError(entry_id)
        owner_address = self._owner_address()

        self._failures.pop(entry_id, None)
        self._publish(entry_id, MintState.MINTING)
        logger.info(f"Minting entry {entry_id} for {owner_address}")

        try:
            metadata_uri, token = await self._create_token(entry, owner_address)
        except asyncio.CancelledError:
            self._fail(entry_id, ChainError("Mint cancelled", side_effect_possible=True))
            raise
        except (CollaboratorError, EntryValidationError) as e:
            self._fail(entry_id, e)
            raise

        minted = entry.model_copy(update={"is_minted": True})
        try:
            owner = await self.coordinator.get_user(entry.user_id, local_only=True)
            streak = owner.current_streak if owner else 0
            award = compute_clarity_points(minted, streak, config=self.points_config).nft_minting
            await self.coordinator.record_mint(entry_id, token.mint_address, token.signature, metadata_uri, award)
        except (StorageError, NotFoundError) as e:
            error = MintPersistenceError(entry_id, token.mint_address, token.signature, reason=str(e))
            self._fail(entry_id, error)
            raise error from e

        logger.info(f"Entry {entry_id} minted as {token.mint_address} (+{award} points)")
        self._publish(entry_id, MintState.MINTED)
        return MintResult(
            entry_id=entry_id,
            nft_address=token.mint_address,
            transaction_signature=token.signature,
            metadata_uri=metadata_uri,
            points_awarded=award,
        )

    async def _create_token(self, entry: JournalEntryBase, owner_address: str) -> Tuple[str, MintedToken]:
        try:
            metadata = self.build_metadata(entry, owner_address)
        except ValueError as e:
            raise EntryValidationError(f"Cannot build metadata for entry {entry.id}: {e}") from e

        try:
            metadata_uri = await self.metadata_store.upload(metadata)
        except CollaboratorError:
            raise
        except Exception as e:
            raise MetadataStoreError(f"Metadata upload failed: {e}", side_effect_possible=True) from e

        try:
            token: MintedToken = await self.chain.create_non_fungible_token(owner_address)
        except CollaboratorError:
            raise
        except asyncio.TimeoutError as e:
            raise ChainError("Mint confirmation timed out", side_effect_possible=True) from e
        except Exception as e:
            raise ChainError(f"Token creation failed: {e}", side_effect_possible=True) from e

        if not token.mint_address or not token.signature:
            raise ChainError("Chain returned an incomplete token", side_effect_possible=True)
        return metadata_uri, token

    async def get_state(self, entry_id: str) -> MintStateOut:
        if entry_id in self._in_flight:
            return MintStateOut(entry_id=entry_id, state=MintState.MINTING)
        try:
            entry = await self._load_entry(entry_id)
        except EntryNotFoundError:
            self._failures.pop(entry_id, None)
            raise
        if entry.is_minted:
            return MintStateOut(entry_id=entry_id, state=MintState.MINTED)
        if entry_id in self._failures:
            return MintStateOut(entry_id=entry_id, state=MintState.MINT_FAILED, error=self._failures[entry_id])
        return MintStateOut(entry_id=entry_id, state=MintState.UNMINTED)

    async def check_minting_costs(self) -> MintCostEstimate:
        self._owner_address()
        balance = await self.wallet.get_balance()
        return MintCostEstimate(
            has_enough_sol=balance >= self.estimated_cost,
            estimated_cost=self.estimated_cost,
            current_balance=balance,
        )

    async def get_nft_metadata(self, entry_id: str) -> NFTMetadata:
        """Previews the metadata a mint of this entry would upload."""
        entry = await self._load_entry(entry_id)
        return self.build_metadata(entry, self._owner_address())
