"""
Root of the Recorder Studio error hierarchy.
"""


class RecorderStudioError(Exception):
    """
    Common base so callers can catch every studio failure in one place.

    Attributes:
        message: What went wrong, suitable for showing to the user
        details: Extra context (paths, counts); appended to ``str()``
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} - Details: {self.details}"


class ConfigurationError(RecorderStudioError):
    """Bad config file, invalid setting value or unknown code dialect."""
