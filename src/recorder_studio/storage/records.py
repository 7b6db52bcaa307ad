"""
Action log mirroring and named records.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from recorder_studio.exceptions import (
    ActionValidationError,
    RecordExistsError,
    RecordNotFoundError,
    StorageError,
)
from recorder_studio.recorder.actions import Action, ActionLog
from recorder_studio.storage.store import KeyValueStore

logger = logging.getLogger(__name__)

ACTIONS_KEY = "recordedActions"
RECORDS_KEY = "recorderStudio.savedRecords"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class NamedRecord:
    """A saved action log."""
    name: str
    actions: List[Action] = field(default_factory=list)
    updated_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "actions": [action.to_dict() for action in self.actions],
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NamedRecord":
        """Create from dictionary."""
        return cls(
            name=data["name"].strip(),
            actions=[Action.from_dict(item) for item in data.get("actions", [])],
            updated_at=data.get("updatedAt") or data.get("updated_at") or "",
        )


def sanitize_records(raw: Any) -> List[Dict[str, Any]]:
    """
    Drop malformed stored records.

    A record survives when it has a non-blank string name and a list of
    actions. Anything else in the stored value is discarded with a warning.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Ignoring stored records of type {type(raw).__name__}")
        return []

    kept = [
        item for item in raw
        if isinstance(item, dict)
        and isinstance(item.get("name"), str)
        and item["name"].strip()
        and isinstance(item.get("actions"), list)
    ]
    if len(kept) != len(raw):
        logger.warning(f"Dropped {len(raw) - len(kept)} malformed saved records")
    return kept


class ActionLogMirror:
    """
    Mirror every action log mutation into the store.

    The full action list is written on each change (last write wins).
    Write failures are logged; the in-memory log stays authoritative.
    """

    def __init__(self, store: KeyValueStore, key: str = ACTIONS_KEY):
        self._store = store
        self._key = key

    def attach(self, log: ActionLog) -> None:
        log.on_change(self.write)

    def write(self, actions: Sequence[Action]) -> bool:
        try:
            self._store.set(self._key, [action.to_dict() for action in actions])
            return True
        except StorageError as e:
            logger.error(f"Failed to persist action log: {e}")
            return False

    def restore(self) -> List[Action]:
        """
        Read the mirrored actions back, skipping entries that fail validation.
        """
        raw = self._store.get(self._key, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring stored '{self._key}' of type {type(raw).__name__}")
            return []
        actions = []
        for index, item in enumerate(raw):
            try:
                actions.append(Action.from_dict(item))
            except ActionValidationError as e:
                logger.warning(f"Skipping stored action #{index}: {e}")
        return actions


class NamedRecords:
    """
    Named, saved action logs kept sorted by name.

    Example:
        >>> records = NamedRecords(MemoryStore())
        >>> records.save("login", log.actions)
        >>> records.load("login", log)
    """

    def __init__(self, store: KeyValueStore, key: str = RECORDS_KEY):
        self._store = store
        self._key = key

    def _read(self) -> List[Dict[str, Any]]:
        return sanitize_records(self._store.get(self._key))

    def _write(self, records: List[Dict[str, Any]]) -> None:
        records.sort(key=lambda item: item["name"].casefold())
        self._store.set(self._key, records)

    def list(self) -> List[NamedRecord]:
        """All saved records, sorted by name."""
        records = []
        for item in self._read():
            try:
                records.append(NamedRecord.from_dict(item))
            except ActionValidationError as e:
                logger.warning(f"Skipping saved record '{item['name']}': {e}")
        return sorted(records, key=lambda record: record.name.casefold())

    def names(self) -> List[str]:
        return [record.name for record in self.list()]

    def exists(self, name: str) -> bool:
        name = (name or "").strip()
        return any(item["name"] == name for item in self._read())

    def get(self, name: str) -> NamedRecord:
        """
        Find a record by name.

        Raises:
            RecordNotFoundError: If no record has that name
        """
        name = (name or "").strip()
        for item in self._read():
            if item["name"] == name:
                return NamedRecord.from_dict(item)
        raise RecordNotFoundError(name)

    def save(self, name: str, actions: Sequence[Action], overwrite: bool = False) -> NamedRecord:
        """
        Save ``actions`` under ``name``.

        Args:
            name: Record name, trimmed
            actions: Non-empty list of actions
            overwrite: Replace an existing record with the same name

        Returns:
            The saved record

        Raises:
            ActionValidationError: Blank name or empty action list
            RecordExistsError: Name taken and ``overwrite`` is False
            StorageError: The store could not be written
        """
        name = (name or "").strip()
        if not name:
            raise ActionValidationError("Record name is required", invalid_fields={"name": name})
        if not actions:
            raise ActionValidationError("Cannot save an empty action log", invalid_fields={"actions": 0})

        records = self._read()
        index = next((i for i, item in enumerate(records) if item["name"] == name), None)
        if index is not None and not overwrite:
            raise RecordExistsError(name)

        record = NamedRecord(name=name, actions=list(actions))
        if index is None:
            records.append(record.to_dict())
        else:
            records[index] = record.to_dict()
        self._write(records)

        logger.info(f"{'Overwrote' if index is not None else 'Saved'} record '{name}' ({len(record.actions)} actions)")
        return record

    def save_log(self, name: str, log: ActionLog, overwrite: bool = False) -> NamedRecord:
        """Save an action log and mark it clean under ``name``."""
        record = self.save(name, log.actions, overwrite=overwrite)
        log.mark_saved(record.name)
        return record

    def load(self, name: str, log: Optional[ActionLog] = None) -> NamedRecord:
        """
        Load a record, replacing the contents of ``log`` when given.

        Raises:
            RecordNotFoundError: If no record has that name
        """
        record = self.get(name)
        if log is not None:
            log.replace(record.actions, record_name=record.name)
        logger.info(f"Loaded record '{record.name}' ({len(record.actions)} actions)")
        return record

    def delete(self, name: str) -> None:
        """
        Raises:
            RecordNotFoundError: If no record has that name
        """
        name = (name or "").strip()
        records = self._read()
        remaining = [item for item in records if item["name"] != name]
        if len(remaining) == len(records):
            raise RecordNotFoundError(name)
        self._write(remaining)
        logger.info(f"Deleted record '{name}'")
