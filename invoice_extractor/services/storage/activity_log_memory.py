"""
In-memory activity log (for tests and demo runs).
Entries are lost on restart; use the JSON file store for anything else.
"""
from .activity_log_base import ActivityLogStore, DEFAULT_CAPACITY
from ...models.invoice import LogEntry


class InMemoryLogStore(ActivityLogStore):
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        super().__init__(capacity)
        self._logs = []

    async def append(self, entry: LogEntry) -> bool:
        """Store the entry and keep only the newest `capacity` entries"""
        self._logs.append(self._stamp(entry, self._logs))
        self._logs = self._truncate(self._logs)
        return True

    async def list(self) -> list:
        """Return a copy of the stored entries, oldest first"""
        return self._logs[:]
