"""
Persistence exceptions.
"""

from recorder_studio.exceptions.base import RecorderStudioError


class StorageError(RecorderStudioError):
    """
    Error reading or writing the key-value store.
    
    Logged and swallowed for action log mirroring; surfaced for explicit
    named-record saves.
    """
    
    def __init__(self, message: str, key: str | None = None):
        super().__init__(message, {"key": key} if key else None)
        self.key = key


class RecordExistsError(StorageError):
    """
    A named record already exists.
    
    Raised by a save without ``overwrite=True``; the caller asks the user
    to confirm and saves again with the overwrite flag.
    """
    
    def __init__(self, name: str):
        super().__init__(f"Record '{name}' already exists")
        self.name = name


class RecordNotFoundError(StorageError):
    """No named record with the given name."""
    
    def __init__(self, name: str):
        super().__init__(f"Record '{name}' not found")
        self.name = name
