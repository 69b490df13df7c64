"""
JSON-file-backed activity log.

Keeps the whole log as one JSON array on local disk, capped to the most
recent entries. Appends are serialized per process with an asyncio lock, and
the file is replaced atomically so readers never see a half-written array.
"""

import asyncio
import json
import os
from pathlib import Path

from loguru import logger

from .activity_log_base import ActivityLogStore, DEFAULT_CAPACITY
from ...core.config import settings
from ...core.errors import LogStoreError
from ...models.invoice import LogEntry


class JsonFileLogStore(ActivityLogStore):
    """
    Activity log persisted as a JSON array.

    Features:
    - Survives application restarts
    - Bounded size (oldest entries dropped first)
    - Missing or corrupt file is treated as an empty log, never as fatal
    - Single writer per process (asyncio.Lock around read-modify-write)

    Separate processes writing the same file are not coordinated.
    """

    def __init__(self, path: str, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize store with the log file path.

        Args:
            path: Location of the JSON file (parent directory is created on first write)
            capacity: Number of most recent entries to keep
        """
        super().__init__(capacity)
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> list:
        """Read the stored array; absent or unparseable file reads as empty."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise LogStoreError(f"Could not read activity log {self.path}: {e}")

        try:
            logs = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Activity log is not valid JSON, starting empty", path=str(self.path))
            return []

        if not isinstance(logs, list):
            logger.warning("Activity log is not a JSON array, starting empty", path=str(self.path))
            return []

        entries = [entry for entry in logs if isinstance(entry, dict)]
        if len(entries) != len(logs):
            logger.warning(
                "Dropped malformed activity log entries",
                path=str(self.path),
                dropped=len(logs) - len(entries),
            )
        return entries

    def _write(self, logs: list) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(logs, indent=2, ensure_ascii=False, allow_nan=False), encoding="utf-8")
            os.replace(tmp, self.path)
        except (OSError, ValueError) as e:
            raise LogStoreError(f"Could not write activity log {self.path}: {e}")

    def _append_sync(self, entry: LogEntry) -> None:
        try:
            logs = self._read()
        except LogStoreError as e:
            logger.warning(f"{e}; starting a new log")
            logs = []
        logs.append(self._stamp(entry, logs))
        self._write(self._truncate(logs))

    async def append(self, entry: LogEntry) -> bool:
        """
        Append an entry to the log file.

        Args:
            entry: Event to record

        Returns:
            True if written, False if the write failed (the failure is logged)
        """
        async with self._lock:
            try:
                await asyncio.to_thread(self._append_sync, entry)
            except LogStoreError as e:
                logger.error(f"Logging error: {e.message}")
                return False
            except Exception as e:
                logger.exception(f"Unexpected logging error: {e}")
                return False

        logger.debug(
            "Activity logged",
            action=entry.action,
            status=entry.status,
            file_name=entry.file_name,
        )
        return True

    async def list(self) -> list:
        """
        Read every stored entry.

        Returns:
            Entries oldest first, or an empty list if nothing was logged yet
        """
        return await asyncio.to_thread(self._read)


# Default instance; configure location via ACTIVITY_LOG_FILE
activity_log = JsonFileLogStore(settings.activity_log_file, settings.activity_log_capacity)
