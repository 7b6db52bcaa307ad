"""
Utilities module.
"""

from recorder_studio.utils.logging import JsonLineFormatter, setup_logging

__all__ = [
    "JsonLineFormatter",
    "setup_logging",
]
