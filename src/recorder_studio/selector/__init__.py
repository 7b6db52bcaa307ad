"""
Selector Module - Locator synthesis over DOM snapshots.
"""

from recorder_studio.selector.snapshot import DomSnapshot, CARRIED_ATTRIBUTES
from recorder_studio.selector.synthesizer import (
    SelectorSynthesizer,
    SynthesisMode,
    xpath_literal,
    sole_text,
)

__all__ = [
    "DomSnapshot",
    "CARRIED_ATTRIBUTES",
    "SelectorSynthesizer",
    "SynthesisMode",
    "xpath_literal",
    "sole_text",
]
