"""
Storage Module - Key-value persistence for action logs and named records.
"""

from recorder_studio.storage.store import KeyValueStore, MemoryStore, JsonFileStore
from recorder_studio.storage.records import (
    ACTIONS_KEY,
    RECORDS_KEY,
    ActionLogMirror,
    NamedRecord,
    NamedRecords,
    sanitize_records,
)

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "ACTIONS_KEY",
    "RECORDS_KEY",
    "ActionLogMirror",
    "NamedRecord",
    "NamedRecords",
    "sanitize_records",
]
