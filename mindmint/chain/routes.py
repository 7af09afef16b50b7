import logging

from fastapi import APIRouter, Depends, HTTPException, status

from mindmint.chain.schemas import AirdropRequest, AirdropResult, WalletBalance
from mindmint.core import config
from mindmint.core.dependency import get_wallet
from mindmint.core.exceptions import MindMintError
from mindmint.core.http import to_http_exception
from mindmint.mint.providers.base import WalletAdapter

router = APIRouter(prefix="/wallet", tags=["Wallet"])
logger = logging.getLogger(__name__)


@router.get(
    "/balance",
    response_model=WalletBalance,
    summary="Get wallet balance",
    responses={
        200: {"description": "Balance retrieved successfully."},
        409: {"description": "Wallet not connected."},
        502: {"description": "Balance lookup failed."},
    },
)
async def get_balance_route(wallet: WalletAdapter = Depends(get_wallet)) -> WalletBalance:
    try:
        return WalletBalance(
            address=wallet.get_public_address(),
            balance=await wallet.get_balance(),
            network=config.SOLANA_NETWORK,
        )
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching wallet balance: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve balance")


@router.post(
    "/airdrop",
    response_model=AirdropResult,
    summary="Request test SOL",
    description="Airdrop SOL to the wallet. Only available on devnet and testnet.",
    responses={
        200: {"description": "Airdrop requested."},
        403: {"description": "Not available on this network."},
        409: {"description": "Wallet not connected."},
        502: {"description": "Airdrop request failed."},
    },
)
async def airdrop_route(
    request: AirdropRequest,
    wallet: WalletAdapter = Depends(get_wallet),
) -> AirdropResult:
    if not config.is_test_network():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Airdrops are only available on test networks")
    try:
        signature = await wallet.request_test_funds(request.amount)
        return AirdropResult(signature=signature, amount=request.amount)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error requesting airdrop: {e}")
        raise HTTPException(status_code=500, detail="Failed to request airdrop")
