"""
Recorder Studio - Record browser interactions as robust XPath-located
actions, generate Playwright or Puppeteer code, and replay them over the
Chrome DevTools protocol.

Quick Start:
    >>> from recorder_studio import RecorderStudio
    >>> studio = RecorderStudio()
    >>> await studio.start_recording(page)
    >>> # click around
    >>> await studio.stop_recording()
    >>> print(studio.generate(dialect="playwright"))
"""

__version__ = "0.1.0"

from recorder_studio.config import Settings, get_settings, load_config
from recorder_studio.recorder.actions import Action, ActionKind, ActionLog
from recorder_studio.recorder.script_generator import generate
from recorder_studio.replay.engine import ReplayEngine, ReplayResult
from recorder_studio.selector import DomSnapshot, SelectorSynthesizer
from recorder_studio.storage import JsonFileStore, MemoryStore, NamedRecords
from recorder_studio.studio import RecorderStudio

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "load_config",
    "Action",
    "ActionKind",
    "ActionLog",
    "generate",
    "ReplayEngine",
    "ReplayResult",
    "DomSnapshot",
    "SelectorSynthesizer",
    "JsonFileStore",
    "MemoryStore",
    "NamedRecords",
    "RecorderStudio",
]
