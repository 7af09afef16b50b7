import logging

from fastapi import APIRouter, Depends, HTTPException

from mindmint.core.dependency import get_current_user_id, get_sync_coordinator
from mindmint.core.exceptions import MindMintError, UserNotFoundError
from mindmint.core.http import to_http_exception
from mindmint.sync.coordinator import SyncCoordinator
from mindmint.users.schemas import UserInsights, UserOut, UserPreferencesUpdate, WalletConnectRequest

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)


@router.get(
    "/me",
    response_model=UserOut,
    summary="Get the device user",
    description="Return the profile, streaks and clarity points of the user owning this device.",
    responses={
        200: {"description": "User retrieved successfully."},
        500: {"description": "Failed to retrieve user."},
    },
)
async def get_me_route(
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> UserOut:
    try:
        user = await coordinator.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve user")


@router.put(
    "/me/preferences",
    response_model=UserOut,
    summary="Update preferences",
    description="Change notification, theme or sync preferences. Omitted fields keep their value.",
    responses={
        200: {"description": "Preferences updated successfully."},
        422: {"description": "Invalid preference value."},
        500: {"description": "Failed to update preferences."},
    },
)
async def update_preferences_route(
    preferences: UserPreferencesUpdate,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> UserOut:
    try:
        return await coordinator.update_preferences(user_id, preferences)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating preferences for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update preferences")


@router.post(
    "/me/wallet",
    response_model=UserOut,
    summary="Connect a wallet",
    responses={
        200: {"description": "Wallet connected successfully."},
        500: {"description": "Failed to connect wallet."},
    },
)
async def connect_wallet_route(
    request: WalletConnectRequest,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> UserOut:
    try:
        return await coordinator.connect_wallet(user_id, request.wallet_address)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error connecting wallet for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to connect wallet")


@router.delete(
    "/me/wallet",
    response_model=UserOut,
    summary="Disconnect the wallet",
    responses={
        200: {"description": "Wallet disconnected successfully."},
        500: {"description": "Failed to disconnect wallet."},
    },
)
async def disconnect_wallet_route(
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> UserOut:
    try:
        return await coordinator.disconnect_wallet(user_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error disconnecting wallet for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to disconnect wallet")


@router.get(
    "/me/insights",
    response_model=UserInsights,
    summary="Get streak and mood insights",
    description="Current streak, streak message, mood distribution and the last seven days of moods.",
    responses={
        200: {"description": "Insights computed successfully."},
        500: {"description": "Failed to compute insights."},
    },
)
async def get_insights_route(
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> UserInsights:
    try:
        return await coordinator.get_insights(user_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error computing insights for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute insights")
