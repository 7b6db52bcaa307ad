"""
Recorder Studio - Coordinator for capture, action log, storage and replay.

Wires the message bus channels:

    capture  SetRecording / ArmAssertion / Disarm  -> DomEventCapture
    log      ActionRecorded                        -> ActionLog (mirrored to the store)
"""

import asyncio
import logging
from typing import List, Optional, TYPE_CHECKING

from recorder_studio.config import Settings, get_settings
from recorder_studio.recorder.actions import Action, ActionLog
from recorder_studio.recorder.capture import DomEventCapture
from recorder_studio.recorder.messages import (
    CAPTURE_CHANNEL,
    LOG_CHANNEL,
    ActionRecorded,
    ArmAssertion,
    MessageBus,
    SetRecording,
)
from recorder_studio.recorder.recorder import BrowserRecorder
from recorder_studio.recorder.script_generator import generate
from recorder_studio.recorder.state import AssertionKind, RecorderState
from recorder_studio.replay.engine import ReplayEngine, ReplayResult
from recorder_studio.replay.transport import DebuggerTarget
from recorder_studio.storage import ActionLogMirror, KeyValueStore, MemoryStore, NamedRecord, NamedRecords

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


class RecorderStudio:
    """
    One recording workspace.

    Example:
        >>> studio = RecorderStudio(store=JsonFileStore("./recorder_studio.json"))
        >>> await studio.start_recording(page)
        >>> # user interacts
        >>> await studio.stop_recording()
        >>> print(studio.generate())
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or MemoryStore()

        self.bus = MessageBus()
        self.log = ActionLog()
        self.capture = DomEventCapture(
            self.bus,
            description_max_length=self.settings.recorder.description_max_length,
        )
        self.mirror = ActionLogMirror(self.store)
        self.mirror.attach(self.log)
        self.records = NamedRecords(self.store)

        self.bus.subscribe(LOG_CHANNEL, ActionRecorded, self._on_action_recorded)
        self._recorder: Optional[BrowserRecorder] = None
        self._replay_lock = asyncio.Lock()

    @property
    def state(self) -> RecorderState:
        return self.capture.state

    @property
    def actions(self) -> List[Action]:
        return self.log.actions

    def _on_action_recorded(self, message: ActionRecorded) -> None:
        self.log.append(message.action)

    # Recording

    async def attach(self, page: "Page") -> BrowserRecorder:
        """Install capture on a Playwright page."""
        if self._recorder is None:
            self._recorder = BrowserRecorder(self.capture)
        if not self._recorder.is_attached:
            await self._recorder.attach(page)
        return self._recorder

    async def start_recording(self, page: Optional["Page"] = None) -> None:
        if page is not None:
            await self.attach(page)
        await self.bus.publish(CAPTURE_CHANNEL, SetRecording(True))

    async def stop_recording(self) -> None:
        await self.bus.publish(CAPTURE_CHANNEL, SetRecording(False))

    async def toggle_recording(self) -> bool:
        """Pause or resume. Returns True when recording afterwards."""
        await self.bus.publish(CAPTURE_CHANNEL, SetRecording(not self.state.recording))
        return self.state.recording

    async def arm_assertion(self, kind: AssertionKind) -> bool:
        """
        Arm an assertion for the next click.

        Returns:
            False when not recording (the request is ignored)
        """
        await self.bus.publish(CAPTURE_CHANNEL, ArmAssertion(kind))
        return self.state.is_armed

    async def close(self) -> None:
        await self.stop_recording()
        if self._recorder is not None:
            await self._recorder.detach()

    # Log & records

    def restore(self) -> int:
        """Reload the mirrored action log from the store."""
        actions = self.mirror.restore()
        self.log.replace(actions)
        logger.info(f"Restored {len(actions)} actions")
        return len(actions)

    def save(self, name: str, overwrite: bool = False) -> NamedRecord:
        """Save the current log as a named record."""
        return self.records.save_log(name, self.log, overwrite=overwrite)

    def load(self, name: str) -> NamedRecord:
        """Replace the current log with a named record."""
        return self.records.load(name, self.log)

    def generate(self, dialect: Optional[str] = None, page_name: Optional[str] = None) -> str:
        return generate(
            self.log.actions,
            dialect=dialect or self.settings.recorder.dialect,
            page_name=page_name or self.settings.recorder.page_name,
        )

    # Replay

    async def replay(
        self,
        target: DebuggerTarget,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ReplayResult:
        """
        Stop recording, then replay the current log against ``target``.
        """
        async with self._replay_lock:
            await self.bus.publish(CAPTURE_CHANNEL, SetRecording(False))
            engine = ReplayEngine(
                target,
                settle_delay_ms=self.settings.replay.settle_delay_ms,
                settle_timeout_ms=self.settings.replay.settle_timeout_ms,
            )
            return await engine.run(self.log.actions, cancel_event=cancel_event)
