from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class SyncStatus(BaseModel):
    is_online: bool
    last_sync_time: Optional[datetime] = None
    pending_sync: int = 0


class SyncReport(BaseModel):
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    pending: int = 0
