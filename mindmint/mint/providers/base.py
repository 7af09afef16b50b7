"""
Contracts for the external collaborators a mint goes through.

Implementations raise the matching `CollaboratorError` subclass on failure and
set `side_effect_possible` when remote state may already have changed.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Sequence

from pydantic import BaseModel

from mindmint.mint.schemas import NFTMetadata


class MintedToken(BaseModel):
    mint_address: str
    signature: str


class WalletAdapter(ABC):
    """The only holder of key material; other components ask it to sign."""

    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    def get_public_address(self) -> str:
        """Raises `WalletNotConnectedError` when no wallet is connected."""

    @abstractmethod
    async def get_balance(self) -> Decimal:
        """Balance in SOL."""

    @abstractmethod
    async def sign_and_send(self, instructions: Sequence[Any], extra_signers: Sequence[Any] = ()) -> str:
        """
        Signs a transaction made of `instructions` as fee payer and submits it.

        Args:
            instructions (Sequence[Any]): Chain instructions, in order.
            extra_signers (Sequence[Any]): Additional keypairs the transaction needs,
                such as a freshly generated mint account.

        Returns:
            str: Transaction signature.
        """

    @abstractmethod
    async def request_test_funds(self, amount: Decimal) -> str:
        """Airdrops `amount` SOL on a test network; refused on production networks."""


class ChainClient(ABC):
    @abstractmethod
    async def create_non_fungible_token(self, owner_address: str) -> MintedToken:
        """
        Creates one token with supply 1 and zero decimals, owned by `owner_address`.

        Must return within a bounded time: a confirmation timeout is raised as
        a `ChainError`, never left pending.
        """


class MetadataStore(ABC):
    @abstractmethod
    async def upload(self, metadata: NFTMetadata) -> str:
        """Stores the metadata and returns a stable, dereferenceable URI."""
