"""
Replay exceptions.

Every replay failure carries the 1-based index and kind of the action
that failed so the caller can show a precise message.
"""

from recorder_studio.exceptions.base import RecorderStudioError


class ReplayError(RecorderStudioError):
    """Base exception for replay failures."""
    
    def __init__(
        self,
        message: str,
        step_index: int | None = None,
        kind: str | None = None,
        locator: str | None = None,
    ):
        if step_index is not None:
            message = f"Step {step_index} ({kind}) failed: {message}"
        super().__init__(message, {"locator": locator} if locator else None)
        self.step_index = step_index
        self.kind = kind
        self.locator = locator


class ElementNotResolvableError(ReplayError):
    """
    Locator matched no element, or the element is not interactable.
    
    Covers invalid XPath, zero-size elements, hidden elements,
    ``display: none`` and ``pointer-events: none``.
    """
    pass


class UnsupportedElementKindError(ReplayError):
    """Typing target is not an input, textarea, select or content-editable."""
    pass


class SessionAttachError(ReplayError):
    """Could not attach a debugger session to the target tab."""
    pass


class CommandFailureError(ReplayError):
    """
    A protocol command failed.
    
    Raised for protocol-level errors and for in-page script exceptions.
    """
    
    def __init__(self, message: str, method: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.method = method
        if method:
            self.details["method"] = method


class ReplayCancelledError(ReplayError):
    """Replay was cancelled before finishing."""
    pass
