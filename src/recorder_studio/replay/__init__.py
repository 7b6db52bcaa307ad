"""
Replay Module - Re-execute recorded actions over the DevTools protocol.
"""

from recorder_studio.replay.engine import ReplayEngine, ReplayResult
from recorder_studio.replay.transport import (
    DebuggerSession,
    DebuggerTarget,
    PlaywrightDebuggerSession,
    PlaywrightDebuggerTarget,
)
from recorder_studio.replay.websocket import (
    WebSocketDebuggerSession,
    WebSocketDebuggerTarget,
    discover_active_tab,
)

__all__ = [
    "ReplayEngine",
    "ReplayResult",
    "DebuggerSession",
    "DebuggerTarget",
    "PlaywrightDebuggerSession",
    "PlaywrightDebuggerTarget",
    "WebSocketDebuggerSession",
    "WebSocketDebuggerTarget",
    "discover_active_tab",
]
