import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class IdentityStore:
    """Remembers which user this device belongs to across restarts."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        user_id = self.path.read_text(encoding="utf-8").strip()
        return user_id or None

    def save(self, user_id: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(user_id, encoding="utf-8")
        logger.info(f"Device identity stored for user {user_id}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
