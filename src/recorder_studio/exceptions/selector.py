"""
Selector synthesis exceptions.
"""

from recorder_studio.exceptions.base import RecorderStudioError


class SelectorError(RecorderStudioError):
    """Base exception for locator synthesis errors."""
    pass


class NoLocatorError(SelectorError):
    """
    No locator could be produced for the target.
    
    Raised when the captured target is not an element node (text node,
    comment, missing snapshot path). Surfaced to the recording user; the
    event is not recorded.
    """
    
    def __init__(self, message: str, node_type: str | None = None):
        super().__init__(message, {"node_type": node_type} if node_type else None)
        self.node_type = node_type


class AmbiguousLocatorError(SelectorError):
    """
    Candidate locator did not match exactly one element.
    
    Internal to the synthesizer: it always triggers fallthrough to the
    next strategy and never escapes ``SelectorSynthesizer.synthesize``.
    """
    
    def __init__(self, locator: str, match_count: int):
        super().__init__(
            f"Locator matched {match_count} elements",
            {"locator": locator, "match_count": match_count},
        )
        self.locator = locator
        self.match_count = match_count
