from typing import Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from mindmint.core.dependency import get_current_user_id, get_sync_coordinator
from mindmint.core.exceptions import EntryNotFoundError, MindMintError
from mindmint.core.http import to_http_exception
from mindmint.journals.schemas import JournalEntryBase, JournalEntryCreate, JournalEntryUpdate
from mindmint.sync.coordinator import SyncCoordinator

router = APIRouter(prefix="/journals", tags=["Journals"])
logger = logging.getLogger(__name__)


async def _owned_entry(coordinator: SyncCoordinator, journal_id: str, user_id: str) -> JournalEntryBase:
    entry = await coordinator.get_journal_entry(journal_id, local_only=True)
    if entry is None or entry.user_id != user_id:
        raise EntryNotFoundError(journal_id)
    return entry


@router.get(
    "/all",
    response_model=List[JournalEntryBase],
    summary="List journal entries",
    description="Retrieve the user's journal entries, newest first.",
    responses={
        200: {"description": "Entries returned newest first."},
        500: {"description": "Entries could not be read."},
    },
)
async def get_journals_route(
    limit: Optional[int] = Query(None, ge=1),
    local_only: bool = False,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> List[JournalEntryBase]:
    try:
        return await coordinator.get_journal_entries(user_id, limit=limit, local_only=local_only)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching journals for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch journal entries")


@router.get(
    "/today",
    response_model=Optional[JournalEntryBase],
    summary="Get today's journal entry",
    description="Return today's most recent entry, or null if the user has not written today.",
    responses={
        200: {"description": "Lookup completed."},
        500: {"description": "Failed to retrieve today's entry."},
    },
)
async def get_today_journal_route(
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> Optional[JournalEntryBase]:
    try:
        return await coordinator.get_today_entry(user_id)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching today's journal for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve today's entry")


@router.get(
    "/{journal_id}",
    response_model=JournalEntryBase,
    summary="Get one journal entry",
    responses={
        200: {"description": "Entry returned."},
        404: {"description": "Journal not found."},
        500: {"description": "Entry could not be read."},
    },
)
async def read_journal_route(
    journal_id: str,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> JournalEntryBase:
    try:
        entry = await coordinator.get_journal_entry(journal_id)
        if entry is None or entry.user_id != user_id:
            raise EntryNotFoundError(journal_id)
        return entry
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error retrieving journal {journal_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve journal")


@router.post(
    "",
    response_model=JournalEntryBase,
    summary="Write a journal entry",
    description="Store a new entry and award its clarity points.",
    responses={
        200: {"description": "Entry stored with its clarity points."},
        422: {"description": "Content too short or too long, or unknown mood."},
        500: {"description": "Entry could not be stored."},
    },
)
async def create_journal_route(
    journal: JournalEntryCreate,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> JournalEntryBase:
    try:
        return await coordinator.create_entry(user_id, journal.content, journal.mood)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating journal for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create journal")


@router.put(
    "/{journal_id}",
    response_model=JournalEntryBase,
    summary="Update a journal entry",
    description="Edit content or mood. The entry is marked for re-sync.",
    responses={
        200: {"description": "Entry updated and queued for sync."},
        404: {"description": "Journal not found."},
        422: {"description": "Invalid content or mood."},
        500: {"description": "Entry could not be updated."},
    },
)
async def update_journal_route(
    journal_id: str,
    journal: JournalEntryUpdate,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> JournalEntryBase:
    try:
        await _owned_entry(coordinator, journal_id, user_id)
        return await coordinator.update_entry(journal_id, content=journal.content, mood=journal.mood)
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating journal {journal_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update journal")


@router.delete(
    "/{journal_id}",
    response_model=Dict[str, str],
    summary="Delete a journal entry",
    responses={
        200: {"description": "Entry removed locally and from the mirror."},
        404: {"description": "Journal not found."},
        500: {"description": "Entry could not be deleted."},
    },
)
async def delete_journal_route(
    journal_id: str,
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, str]:
    try:
        await _owned_entry(coordinator, journal_id, user_id)
        await coordinator.delete_entry(journal_id)
        return {"detail": "Entry removed locally and from the mirror."}
    except MindMintError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error deleting journal {journal_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete journal")
