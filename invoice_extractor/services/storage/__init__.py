from .activity_log_base import ActivityLogStore
from .activity_log_json import JsonFileLogStore, activity_log
from .activity_log_memory import InMemoryLogStore

__all__ = ["ActivityLogStore", "JsonFileLogStore", "InMemoryLogStore", "activity_log"]
