"""
Tests for the recorder state machine.
"""

import pytest

from recorder_studio.recorder.messages import ActionRecorded, ArmAssertion, Disarm, SetRecording
from recorder_studio.recorder.state import (
    IDLE,
    RECORDING,
    AssertionKind,
    RecorderContext,
    RecorderState,
    transition,
)


class TestTransition:
    """Test the pure transition function."""

    def test_start_and_stop(self):
        assert transition(IDLE, SetRecording(True)) == RECORDING
        assert transition(RECORDING, SetRecording(False)) == IDLE

    def test_arm_while_recording(self):
        state = transition(RECORDING, ArmAssertion(AssertionKind.COLOR))

        assert state.is_armed
        assert state.armed is AssertionKind.COLOR
        assert state.label == "recording+color"

    def test_arm_while_idle_is_ignored(self):
        assert transition(IDLE, ArmAssertion("text")) == IDLE

    def test_rearm_replaces_kind(self):
        armed = RecorderState(recording=True, armed=AssertionKind.TEXT)
        assert transition(armed, ArmAssertion("visible")).armed is AssertionKind.VISIBLE

    def test_disarm(self):
        armed = RecorderState(recording=True, armed=AssertionKind.TEXT)

        assert transition(armed, Disarm()) == RECORDING
        assert transition(IDLE, Disarm()) == IDLE

    def test_stop_clears_armed(self):
        armed = RecorderState(recording=True, armed=AssertionKind.BACKGROUND_COLOR)
        assert transition(armed, SetRecording(False)) == IDLE

    def test_unrelated_message(self, sample_actions):
        assert transition(RECORDING, ActionRecorded(sample_actions[0])) is RECORDING

    def test_unknown_assertion_kind(self):
        with pytest.raises(ValueError):
            ArmAssertion("size")


class TestRecorderState:
    """Test state properties."""

    def test_labels(self):
        assert IDLE.label == "idle"
        assert RECORDING.label == "recording"

    def test_to_dict(self):
        state = RecorderState(recording=True, armed=AssertionKind.BACKGROUND_COLOR)
        assert state.to_dict() == {"recording": True, "armed": "background-color"}
        assert IDLE.to_dict() == {"recording": False, "armed": None}


class TestRecorderContext:
    """Test the state holder."""

    def test_apply(self):
        context = RecorderContext()

        assert context.state.is_idle
        context.apply(SetRecording(True))
        context.apply(ArmAssertion("text"))
        assert context.state.is_armed
        context.apply(Disarm())
        assert context.state == RECORDING
