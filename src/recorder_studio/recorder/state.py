"""
Recording state machine.

Three shapes: idle, recording, and recording with an assertion armed. The
transition function is pure, so it can be tested without a browser.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class AssertionKind(str, Enum):
    """Assertion the next click will capture."""
    TEXT = "text"
    COLOR = "color"
    BACKGROUND_COLOR = "background-color"
    VISIBLE = "visible"


@dataclass(frozen=True)
class RecorderState:
    """Immutable recorder state."""
    recording: bool = False
    armed: Optional[AssertionKind] = None

    @property
    def is_idle(self) -> bool:
        return not self.recording

    @property
    def is_armed(self) -> bool:
        return self.recording and self.armed is not None

    @property
    def label(self) -> str:
        if not self.recording:
            return "idle"
        if self.armed is None:
            return "recording"
        return f"recording+{self.armed.value}"

    def to_dict(self):
        return {
            "recording": self.recording,
            "armed": self.armed.value if self.armed else None,
        }


IDLE = RecorderState()
RECORDING = RecorderState(recording=True)


def transition(state: RecorderState, message) -> RecorderState:
    """
    Compute the next state for a control message.

    Messages other than ``SetRecording``, ``ArmAssertion`` and ``Disarm``
    leave the state unchanged.
    """
    # Imported here, messages imports AssertionKind from this module
    from recorder_studio.recorder.messages import ArmAssertion, Disarm, SetRecording

    if isinstance(message, SetRecording):
        return RECORDING if message.recording else IDLE
    if isinstance(message, ArmAssertion):
        if state.is_idle:
            return state
        return RecorderState(recording=True, armed=AssertionKind(message.kind))
    if isinstance(message, Disarm):
        return RECORDING if state.recording else IDLE
    return state


class RecorderContext:
    """
    Single holder of the current recorder state.

    Everything that needs the state (capture, hover styling, the CLI prompt)
    reads it from here instead of keeping its own flags.
    """

    def __init__(self, state: RecorderState = IDLE):
        self._state = state

    @property
    def state(self) -> RecorderState:
        return self._state

    def apply(self, message) -> RecorderState:
        """Apply a control message and return the new state."""
        previous = self._state
        self._state = transition(previous, message)
        if self._state != previous:
            logger.debug(f"Recorder state {previous.label} -> {self._state.label}")
        return self._state
