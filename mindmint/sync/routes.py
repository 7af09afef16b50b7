import logging

from fastapi import APIRouter, Depends, HTTPException

from mindmint.core.dependency import get_current_user_id, get_sync_coordinator
from mindmint.core.exceptions import MindMintError
from mindmint.core.http import to_http_exception
from mindmint.sync.coordinator import SyncCoordinator
from mindmint.sync.schemas import SyncReport, SyncStatus

router = APIRouter(prefix="/sync", tags=["Sync"])
logger = logging.getLogger(__name__)


@router.post(
    "/run",
    response_model=SyncReport,
    summary="Sync unsynced entries to the cloud",
    description="Push every local-only entry to the cloud mirror. Entries that fail stay pending.",
    responses={
        200: {"description": "Sweep completed; see the report for failures."},
        409: {"description": "A sync is already running."},
        500: {"description": "Failed to run sync."},
    },
)
async def run_sync_route(
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> SyncReport:
    try:
        return await coordinator.sync_to_cloud(user_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error syncing user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to run sync")


@router.get(
    "/status",
    response_model=SyncStatus,
    summary="Get sync status",
    description="Reachability of the cloud mirror, last successful sync and number of pending entries.",
    responses={
        200: {"description": "Status retrieved successfully."},
        500: {"description": "Failed to retrieve sync status."},
    },
)
async def get_sync_status_route(
    refresh: bool = False,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> SyncStatus:
    try:
        if refresh:
            await coordinator.check_online_status()
        return await coordinator.get_sync_status(user_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching sync status for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve sync status")
