"""
Creates one-of-one SPL tokens: a fresh mint with zero decimals, the owner's
associated token account, and a supply of exactly 1, in one transaction.
"""

import asyncio
import logging
from typing import List

from solana.rpc.api import Client
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import CreateAccountParams, create_account
from solders.transaction_status import TransactionConfirmationStatus
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    InitializeMintParams,
    MintToParams,
    create_associated_token_account,
    get_associated_token_address,
    initialize_mint,
    mint_to,
)

from mindmint.core.exceptions import ChainError
from mindmint.mint.providers.base import ChainClient, MintedToken, WalletAdapter

logger = logging.getLogger(__name__)

MINT_ACCOUNT_SIZE = 82
CONFIRMED_STATUSES = (TransactionConfirmationStatus.Confirmed, TransactionConfirmationStatus.Finalized)


def build_mint_instructions(payer: Pubkey, owner: Pubkey, mint: Pubkey, rent_lamports: int) -> List[Instruction]:
    """
    Instructions for a non-fungible token owned by `owner`, paid by `payer`.

    Args:
        payer (Pubkey): Fee payer and mint authority.
        owner (Pubkey): Wallet receiving the single token.
        mint (Pubkey): Address of the new mint account; must sign the transaction.
        rent_lamports (int): Rent-exempt balance for the mint account.

    Returns:
        List[Instruction]: Create mint account, initialize mint, create the
        owner's token account, mint 1.
    """
    token_account = get_associated_token_address(owner, mint)
    return [
        create_account(
            CreateAccountParams(
                from_pubkey=payer,
                to_pubkey=mint,
                lamports=rent_lamports,
                space=MINT_ACCOUNT_SIZE,
                owner=TOKEN_PROGRAM_ID,
            )
        ),
        initialize_mint(
            InitializeMintParams(
                program_id=TOKEN_PROGRAM_ID,
                mint=mint,
                decimals=0,
                mint_authority=payer,
                freeze_authority=payer,
            )
        ),
        create_associated_token_account(payer=payer, owner=owner, mint=mint),
        mint_to(
            MintToParams(
                program_id=TOKEN_PROGRAM_ID,
                mint=mint,
                dest=token_account,
                mint_authority=payer,
                amount=1,
            )
        ),
    ]


class SplTokenChainClient(ChainClient):
    def __init__(
        self,
        rpc_url: str,
        wallet: WalletAdapter,
        confirm_timeout: float = 60.0,
        poll_interval: float = 1.0,
    ):
        self.wallet = wallet
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval
        self._client = Client(rpc_url)

    async def _wait_for_confirmation(self, signature: str) -> None:
        sig = Signature.from_string(signature)
        while True:
            resp = await asyncio.to_thread(self._client.get_signature_statuses, [sig])
            status = resp.value[0] if resp.value else None
            if status is not None:
                if status.err is not None:
                    raise ChainError(f"Transaction {signature} failed: {status.err}")
                if status.confirmation_status in CONFIRMED_STATUSES:
                    return
            await asyncio.sleep(self.poll_interval)

    async def create_non_fungible_token(self, owner_address: str) -> MintedToken:
        try:
            payer = Pubkey.from_string(self.wallet.get_public_address())
            owner = Pubkey.from_string(owner_address)
        except ValueError as e:
            raise ChainError(f"Invalid owner address {owner_address}: {e}") from e

        mint_keypair = Keypair()
        mint = mint_keypair.pubkey()
        try:
            rent = await asyncio.to_thread(self._client.get_minimum_balance_for_rent_exemption, MINT_ACCOUNT_SIZE)
        except Exception as e:
            raise ChainError(f"Failed to fetch rent exemption: {e}") from e

        instructions = build_mint_instructions(payer, owner, mint, rent.value)
        signature = await self.wallet.sign_and_send(instructions, extra_signers=[mint_keypair])

        try:
            await asyncio.wait_for(self._wait_for_confirmation(signature), timeout=self.confirm_timeout)
        except asyncio.TimeoutError as e:
            raise ChainError(
                f"Mint {mint} not confirmed within {self.confirm_timeout}s (signature {signature})",
                side_effect_possible=True,
            ) from e
        except ChainError:
            raise
        except Exception as e:
            raise ChainError(f"Failed to confirm mint {mint}: {e}", side_effect_possible=True) from e

        logger.info(f"Minted token {mint} to {owner_address}: {signature}")
        return MintedToken(mint_address=str(mint), signature=signature)
