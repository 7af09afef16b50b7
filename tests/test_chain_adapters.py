import json
from decimal import Decimal

import pytest
from solders.keypair import Keypair
from spl.token.constants import TOKEN_PROGRAM_ID

from mindmint.chain.spl_token import MINT_ACCOUNT_SIZE, build_mint_instructions
from mindmint.chain.wallet import KeypairWallet, lamports_to_sol, load_keypair, sol_to_lamports
from mindmint.core.exceptions import WalletError, WalletNotConnectedError


def test_load_keypair_from_json_array():
    keypair = Keypair()
    loaded = load_keypair(json.dumps(list(bytes(keypair))))
    assert loaded.pubkey() == keypair.pubkey()


def test_load_keypair_from_base58():
    keypair = Keypair()
    assert load_keypair(str(keypair)).pubkey() == keypair.pubkey()


@pytest.mark.parametrize("raw", ["[1, 2, 3]", "not-a-key"])
def test_load_keypair_rejects_garbage(raw):
    with pytest.raises(ValueError):
        load_keypair(raw)


def test_sol_conversions():
    assert sol_to_lamports(Decimal("0.01")) == 10_000_000
    assert lamports_to_sol(1_500_000_000) == Decimal("1.5")


def test_wallet_without_key_is_disconnected():
    wallet = KeypairWallet.from_private_key("http://127.0.0.1:8899", "")
    assert wallet.is_connected() is False
    with pytest.raises(WalletNotConnectedError):
        wallet.get_public_address()


def test_wallet_exposes_only_the_public_address():
    keypair = Keypair()
    wallet = KeypairWallet("http://127.0.0.1:8899", keypair)
    assert wallet.is_connected() is True
    assert wallet.get_public_address() == str(keypair.pubkey())


@pytest.mark.asyncio
async def test_airdrop_refused_on_production_network():
    wallet = KeypairWallet("http://127.0.0.1:8899", Keypair(), test_network=False)
    with pytest.raises(WalletError):
        await wallet.request_test_funds(Decimal("1"))


def test_mint_instructions():
    payer = Keypair().pubkey()
    mint = Keypair().pubkey()

    instructions = build_mint_instructions(payer, payer, mint, rent_lamports=1_461_600)

    assert len(instructions) == 4
    create_account, initialize_mint, create_token_account, mint_to = instructions
    assert create_account.accounts[1].pubkey == mint
    assert create_account.accounts[1].is_signer is True
    assert initialize_mint.program_id == TOKEN_PROGRAM_ID
    assert mint_to.program_id == TOKEN_PROGRAM_ID
    # mint_to data: instruction tag 7 followed by the amount as u64
    assert mint_to.data[0] == 7
    assert int.from_bytes(mint_to.data[1:9], "little") == 1
    assert MINT_ACCOUNT_SIZE == 82
