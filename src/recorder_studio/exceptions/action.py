"""
Action-related exceptions.
"""

from recorder_studio.exceptions.base import RecorderStudioError


class ActionError(RecorderStudioError):
    """Base exception for action-related errors."""
    pass


class ActionValidationError(ActionError):
    """
    Action fields are invalid.
    
    Raised when an action is built or deserialized with missing or
    inconsistent fields, or when an action log operation gets bad input.
    """
    
    def __init__(self, message: str, kind: str | None = None, invalid_fields: dict | None = None):
        super().__init__(message, {"kind": kind, "invalid_fields": invalid_fields})
        self.kind = kind
        self.invalid_fields = invalid_fields
