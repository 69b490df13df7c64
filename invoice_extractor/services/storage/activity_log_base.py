"""
Abstract base class for activity log stores.

Defines the interface that every activity log backend implements, so the
upload pipeline and the HTTP layer can receive the store through dependency
injection and tests can swap in an in-memory one.
"""

import time
from abc import ABC, abstractmethod

from ...models.invoice import LogEntry

DEFAULT_CAPACITY = 100


class ActivityLogStore(ABC):
    """
    Abstract base class for the bounded activity log.

    Implementations:
    - In-memory list (for tests/demo)
    - JSON file on local disk (default)
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self.capacity = capacity

    def _stamp(self, entry: LogEntry, logs: list) -> dict:
        """Assign a creation-time id that is strictly greater than the newest stored id."""
        entry_id = int(time.time() * 1000)
        if logs:
            last_id = logs[-1].get("id")
            if isinstance(last_id, int) and last_id >= entry_id:
                entry_id = last_id + 1
        payload = entry.to_payload()
        payload["id"] = entry_id
        return payload

    def _truncate(self, logs: list) -> list:
        if len(logs) > self.capacity:
            return logs[-self.capacity:]
        return logs

    @abstractmethod
    async def append(self, entry: LogEntry) -> bool:
        """
        Record a pipeline event.

        The store assigns the entry id and drops the oldest entries once more
        than `capacity` are held.

        Args:
            entry: Event to record (its id is overwritten)

        Returns:
            True if the entry was stored, False if the write failed.
            Never raises: logging must not fail the primary operation.
        """
        pass

    @abstractmethod
    async def list(self) -> list:
        """
        Return all stored entries, oldest first.

        Returns:
            List of entry dictionaries (camelCase keys), empty if the store
            has never been written.

        Raises:
            LogStoreError: if the backing storage exists but cannot be read
        """
        pass
