from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from infographix.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class HistoryItem:
    """One generated report as shown in the history list."""
    query: str
    report: Dict[str, Any]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    # Milliseconds since the epoch
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))
    provider: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.id and self.query and self.timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "timestamp": self.timestamp,
            "provider": self.provider,
            "report": self.report,
        }


class HistoryStore:
    """
    In-memory generation history, newest first.

    Holds at most ``max_items`` entries; the oldest are dropped as new ones
    arrive. Reports are stored as given.
    """

    def __init__(self, max_items: Optional[int] = None) -> None:
        self.max_items = max_items if max_items is not None else settings.HISTORY_MAX_ITEMS
        self._items: List[HistoryItem] = []
        self._lock = threading.Lock()

    def add(self, item: HistoryItem) -> bool:
        """Store ``item`` at the front. Incomplete items are skipped; returns whether stored."""
        if not item.is_complete():
            logger.warning("[HISTORY] Skipping history item with missing id, query or timestamp")
            return False

        with self._lock:
            self._items = [existing for existing in self._items if existing.id != item.id]
            self._items.insert(0, item)
            del self._items[self.max_items:]
        return True

    def list(self) -> List[HistoryItem]:
        with self._lock:
            return list(self._items)

    def get(self, item_id: str) -> Optional[HistoryItem]:
        with self._lock:
            return next((item for item in self._items if item.id == item_id), None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
        logger.info("[HISTORY] History cleared")

    def __len__(self) -> int:
        return len(self._items)


_history_store: Optional[HistoryStore] = None


def get_history_store() -> HistoryStore:
    """Get or create the history store singleton."""
    global _history_store
    if _history_store is None:
        _history_store = HistoryStore()
    return _history_store
