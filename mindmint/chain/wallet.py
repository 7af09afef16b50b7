"""
Wallet backed by a locally held Solana keypair.

This module is the only place key material lives. Other components pass
instructions in and get a signature back.
"""

import asyncio
import json
import logging
from decimal import Decimal
from typing import Any, Optional, Sequence

import base58
from solana.rpc.api import Client
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from mindmint.core.exceptions import WalletError, WalletNotConnectedError
from mindmint.mint.providers.base import WalletAdapter

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000


def load_keypair(private_key: str) -> Keypair:
    """
    Loads a keypair from a base58 secret or a JSON array of 64 bytes.

    Raises:
        ValueError: If the key cannot be decoded.
    """
    raw = private_key.strip()
    if raw.startswith("["):
        try:
            secret = bytes(json.loads(raw)[:64])
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise ValueError("Invalid wallet key: expected a JSON array of 64 bytes") from e
    else:
        try:
            secret = base58.b58decode(raw)
        except ValueError as e:
            raise ValueError("Invalid wallet key: expected a base58 secret") from e
    if len(secret) != 64:
        raise ValueError(f"Invalid wallet key: expected 64 bytes, got {len(secret)}")
    return Keypair.from_bytes(secret)


def sol_to_lamports(amount: Decimal) -> int:
    return int(amount * LAMPORTS_PER_SOL)


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(lamports) / LAMPORTS_PER_SOL


class KeypairWallet(WalletAdapter):
    def __init__(self, rpc_url: str, keypair: Optional[Keypair] = None, test_network: bool = True):
        self.rpc_url = rpc_url
        self.test_network = test_network
        self._keypair = keypair
        self._client = Client(rpc_url)

    @classmethod
    def from_private_key(cls, rpc_url: str, private_key: str, test_network: bool = True) -> "KeypairWallet":
        keypair = None
        if private_key:
            keypair = load_keypair(private_key)
            logger.info(f"Wallet loaded for {keypair.pubkey()}")
        else:
            logger.info("No wallet key configured, wallet is disconnected")
        return cls(rpc_url, keypair, test_network=test_network)

    def _require_keypair(self) -> Keypair:
        if self._keypair is None:
            raise WalletNotConnectedError()
        return self._keypair

    def is_connected(self) -> bool:
        return self._keypair is not None

    def get_public_address(self) -> str:
        return str(self._require_keypair().pubkey())

    async def get_balance(self) -> Decimal:
        pubkey = self._require_keypair().pubkey()
        try:
            resp = await asyncio.to_thread(self._client.get_balance, pubkey)
        except Exception as e:
            raise WalletError(f"Failed to fetch balance: {e}") from e
        return lamports_to_sol(resp.value)

    def _send(self, instructions: Sequence[Any], extra_signers: Sequence[Keypair]) -> str:
        payer = self._require_keypair()
        blockhash = self._client.get_latest_blockhash().value.blockhash
        message = Message.new_with_blockhash(list(instructions), payer.pubkey(), blockhash)
        tx = Transaction([payer, *extra_signers], message, blockhash)
        resp = self._client.send_transaction(tx)
        return str(resp.value)

    async def sign_and_send(self, instructions: Sequence[Any], extra_signers: Sequence[Any] = ()) -> str:
        self._require_keypair()
        try:
            signature = await asyncio.to_thread(self._send, instructions, extra_signers)
        except Exception as e:
            # The node may have accepted the transaction before the error surfaced
            raise WalletError(f"Failed to send transaction: {e}", side_effect_possible=True) from e
        logger.info(f"Transaction sent: {signature}")
        return signature

    async def request_test_funds(self, amount: Decimal) -> str:
        pubkey: Pubkey = self._require_keypair().pubkey()
        if not self.test_network:
            raise WalletError("Airdrops are only available on test networks")
        try:
            resp = await asyncio.to_thread(self._client.request_airdrop, pubkey, sol_to_lamports(amount))
        except Exception as e:
            raise WalletError(f"Airdrop request failed: {e}") from e
        signature = str(resp.value)
        logger.info(f"Requested {amount} SOL airdrop for {pubkey}: {signature}")
        return signature
