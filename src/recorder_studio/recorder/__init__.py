"""
Recorder Module - Capture user actions and render them as scripts.

This module turns page interactions into an ordered action log and
generates browser-automation code from it.
"""

from recorder_studio.recorder.actions import Action, ActionKind, ActionLog
from recorder_studio.recorder.state import (
    AssertionKind,
    RecorderContext,
    RecorderState,
    transition,
)
from recorder_studio.recorder.messages import (
    CAPTURE_CHANNEL,
    LOG_CHANNEL,
    ActionRecorded,
    ArmAssertion,
    Disarm,
    MessageBus,
    SetRecording,
)
from recorder_studio.recorder.capture import DomEventCapture, ClickEvent, ChangeEvent
from recorder_studio.recorder.recorder import BrowserRecorder
from recorder_studio.recorder.script_generator import ScriptGenerator, generate, get_generator

__all__ = [
    "Action",
    "ActionKind",
    "ActionLog",
    "AssertionKind",
    "RecorderContext",
    "RecorderState",
    "transition",
    "CAPTURE_CHANNEL",
    "LOG_CHANNEL",
    "ActionRecorded",
    "ArmAssertion",
    "Disarm",
    "MessageBus",
    "SetRecording",
    "DomEventCapture",
    "ClickEvent",
    "ChangeEvent",
    "BrowserRecorder",
    "ScriptGenerator",
    "generate",
    "get_generator",
]
