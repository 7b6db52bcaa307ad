"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout Recorder Studio,
providing clear error types for different failure scenarios.
"""

from recorder_studio.exceptions.base import (
    RecorderStudioError,
    ConfigurationError,
)
from recorder_studio.exceptions.selector import (
    SelectorError,
    NoLocatorError,
    AmbiguousLocatorError,
)
from recorder_studio.exceptions.action import (
    ActionError,
    ActionValidationError,
)
from recorder_studio.exceptions.storage import (
    StorageError,
    RecordExistsError,
    RecordNotFoundError,
)
from recorder_studio.exceptions.replay import (
    ReplayError,
    ElementNotResolvableError,
    UnsupportedElementKindError,
    SessionAttachError,
    CommandFailureError,
    ReplayCancelledError,
)

__all__ = [
    # Base exceptions
    "RecorderStudioError",
    "ConfigurationError",
    # Selector exceptions
    "SelectorError",
    "NoLocatorError",
    "AmbiguousLocatorError",
    # Action exceptions
    "ActionError",
    "ActionValidationError",
    # Storage exceptions
    "StorageError",
    "RecordExistsError",
    "RecordNotFoundError",
    # Replay exceptions
    "ReplayError",
    "ElementNotResolvableError",
    "UnsupportedElementKindError",
    "SessionAttachError",
    "CommandFailureError",
    "ReplayCancelledError",
]
