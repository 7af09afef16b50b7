import logging

from fastapi import APIRouter, Depends, HTTPException

from mindmint.core.dependency import get_current_user_id, get_mint_state_machine
from mindmint.core.exceptions import EntryNotFoundError, MindMintError
from mindmint.core.http import to_http_exception
from mindmint.mint.schemas import MintCostEstimate, MintResult, MintStateOut, NFTMetadata
from mindmint.mint.state_machine import MintStateMachine

router = APIRouter(prefix="/mint", tags=["Mint"])
logger = logging.getLogger(__name__)


async def _check_owner(machine: MintStateMachine, entry_id: str, user_id: str) -> None:
    entry = await machine.coordinator.get_journal_entry(entry_id, local_only=True)
    if entry is None or entry.user_id != user_id:
        raise EntryNotFoundError(entry_id)


@router.get(
    "/costs",
    response_model=MintCostEstimate,
    summary="Check minting costs",
    description="Compare the wallet balance with the estimated cost of one mint.",
    responses={
        200: {"description": "Estimate computed successfully."},
        409: {"description": "Wallet not connected."},
        502: {"description": "Balance lookup failed."},
    },
)
async def check_costs_route(
    machine: MintStateMachine = Depends(get_mint_state_machine),
) -> MintCostEstimate:
    try:
        return await machine.check_minting_costs()
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error checking minting costs: {e}")
        raise HTTPException(status_code=500, detail="Failed to check minting costs")


@router.post(
    "/{entry_id}",
    response_model=MintResult,
    summary="Mint a journal entry",
    description="Turn one entry into a single non-fungible token and award the minting points.",
    responses={
        200: {"description": "Entry minted successfully."},
        404: {"description": "Journal not found."},
        409: {"description": "Already minted, mint in progress, or wallet not connected."},
        502: {"description": "Wallet, chain or metadata store failed; the entry stays unminted."},
        500: {"description": "Token created but not recorded locally."},
    },
)
async def mint_entry_route(
    entry_id: str,
    machine: MintStateMachine = Depends(get_mint_state_machine),
    user_id: str = Depends(get_current_user_id),
) -> MintResult:
    try:
        await _check_owner(machine, entry_id, user_id)
        return await machine.mint_entry(entry_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error minting entry {entry_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to mint entry")


@router.get(
    "/{entry_id}/state",
    response_model=MintStateOut,
    summary="Get the mint state of an entry",
    responses={
        200: {"description": "State retrieved successfully."},
        404: {"description": "Journal not found."},
    },
)
async def get_mint_state_route(
    entry_id: str,
    machine: MintStateMachine = Depends(get_mint_state_machine),
    user_id: str = Depends(get_current_user_id),
) -> MintStateOut:
    try:
        await _check_owner(machine, entry_id, user_id)
        return await machine.get_state(entry_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching mint state of {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve mint state")


@router.get(
    "/{entry_id}/metadata",
    response_model=NFTMetadata,
    summary="Preview token metadata",
    description="Show the metadata a mint of this entry would upload.",
    responses={
        200: {"description": "Metadata built successfully."},
        404: {"description": "Journal not found."},
        409: {"description": "Wallet not connected."},
    },
)
async def get_mint_metadata_route(
    entry_id: str,
    machine: MintStateMachine = Depends(get_mint_state_machine),
    user_id: str = Depends(get_current_user_id),
) -> NFTMetadata:
    try:
        await _check_owner(machine, entry_id, user_id)
        return await machine.get_nft_metadata(entry_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error building metadata for {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to build metadata")
