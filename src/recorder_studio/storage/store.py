"""
Key-value stores.

The recorder persists JSON-compatible values under string keys, the same
shape as browser extension storage.
"""

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from recorder_studio.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Abstract key-value store.

    Values must be JSON-serializable. Implementations raise StorageError
    when a value cannot be read or written.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key`` or ``default``."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...


class MemoryStore(KeyValueStore):
    """In-process store. Values are deep-copied in and out."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(data) if data else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        try:
            json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value is not JSON-serializable: {e}", key=key)
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class JsonFileStore(KeyValueStore):
    """
    Store backed by a single JSON object file.

    Every write rewrites the whole file through a temporary file in the
    same directory, so readers never see a half-written document.

    Example:
        >>> store = JsonFileStore("./recorder_studio.json")
        >>> store.set("recordedActions", [])
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Store file {self.path} is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise StorageError(f"Store file {self.path} must hold a JSON object")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            payload = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value is not JSON-serializable: {e}")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}")
        logger.debug(f"Wrote store file {self.path}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        try:
            self._write(data)
        except StorageError as e:
            raise StorageError(e.message, key=key)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
