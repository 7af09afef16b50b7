"""
In-process event channel the UI layer subscribes to instead of polling state.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    USER_UPDATED = "user_updated"
    ENTRY_CREATED = "entry_created"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"
    SYNC_STATUS_CHANGED = "sync_status_changed"
    MINT_STATE_CHANGED = "mint_state_changed"


Listener = Callable[[EventKind, Dict[str, Any]], None]


class EventBus:
    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registers a listener for every event.

        Returns:
            Callable[[], None]: Removes the listener when called; safe to call twice.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, kind: EventKind, **payload: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(kind, payload)
            except Exception as e:
                logger.error(f"Event listener failed on {kind.value}: {e}")
