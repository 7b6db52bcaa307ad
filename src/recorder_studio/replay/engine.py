"""
Replay Engine - Re-execute an action log against a live tab.

Interactions are reproduced with low-level protocol commands: element
resolution in the page, synthetic mouse events for clicks and direct value
assignment for typing and selection. Assertions are not checked during
replay.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from recorder_studio.exceptions import (
    CommandFailureError,
    ElementNotResolvableError,
    ReplayCancelledError,
    ReplayError,
    UnsupportedElementKindError,
)
from recorder_studio.recorder.actions import Action, ActionKind
from recorder_studio.replay.scripts import click_point_expression, set_value_expression
from recorder_studio.replay.transport import DebuggerSession, DebuggerTarget

logger = logging.getLogger(__name__)

SETTLE_DELAY_MS = 300
SETTLE_TIMEOUT_MS = 500


@dataclass
class ReplayResult:
    """Outcome of a completed replay."""
    total: int
    executed: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def steps_executed(self) -> int:
        return len(self.executed)

    @property
    def steps_skipped(self) -> int:
        return len(self.skipped)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "executed": self.executed,
            "skipped": self.skipped,
            "duration_ms": self.duration_ms,
        }


class ReplayEngine:
    """
    Sequential, fail-fast replayer.

    Each run attaches a fresh session, executes actions strictly in order
    and always detaches, also when a step fails or the run is cancelled.

    Example:
        >>> engine = ReplayEngine(PlaywrightDebuggerTarget(page))
        >>> result = await engine.run(log.actions)
        >>> print(result.steps_executed)
    """

    def __init__(
        self,
        target: DebuggerTarget,
        settle_delay_ms: int = SETTLE_DELAY_MS,
        settle_timeout_ms: int = SETTLE_TIMEOUT_MS,
    ):
        """
        Initialize the engine.

        Args:
            target: Tab to replay against
            settle_delay_ms: Pause after every click, type and select
            settle_timeout_ms: Max wait for a lifecycle event after attaching
        """
        self._target = target
        self._settle_delay = settle_delay_ms / 1000
        self._settle_timeout = settle_timeout_ms / 1000

    async def run(
        self,
        actions: Sequence[Action],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ReplayResult:
        """
        Replay ``actions`` in order.

        Args:
            actions: Actions to replay
            cancel_event: When set, the run stops before the next step

        Returns:
            ReplayResult with executed and skipped step numbers (1-based)

        Raises:
            SessionAttachError: If the tab cannot be attached
            ElementNotResolvableError: A locator does not resolve to an
                interactable element
            UnsupportedElementKindError: A type/select target is not a field
            CommandFailureError: A protocol command or page script failed
            ReplayCancelledError: ``cancel_event`` was set
        """
        actions = list(actions)
        result = ReplayResult(total=len(actions))
        start = time.time()

        await self._target.release_stale()
        session = await self._target.attach()
        logger.info(f"Replaying {len(actions)} actions on {self._target.target_id}")

        try:
            await self._prepare(session)

            for index, action in enumerate(actions, start=1):
                if cancel_event is not None and cancel_event.is_set():
                    raise ReplayCancelledError("Replay cancelled", step_index=index, kind=action.kind.value)

                logger.debug(f"[Run] {index}/{len(actions)} {action.kind.value}: {action.description}")
                if await self._execute(session, index, action):
                    result.executed.append(index)
                else:
                    result.skipped.append(index)

        except ReplayError as e:
            logger.error(f"Replay failed: {e}")
            raise
        finally:
            try:
                await session.detach()
            except Exception as e:
                logger.warning(f"Detach failed: {e}")

        result.duration_ms = int((time.time() - start) * 1000)
        logger.info(
            f"Replay finished: {result.steps_executed} executed, "
            f"{result.steps_skipped} skipped in {result.duration_ms}ms"
        )
        return result

    async def _prepare(self, session: DebuggerSession) -> None:
        for domain in ("Page", "Runtime", "DOM"):
            await session.send(f"{domain}.enable")

        try:
            await session.send("Page.setLifecycleEventsEnabled", {"enabled": True})
            await session.wait_for_event("Page.lifecycleEvent", self._settle_timeout)
        except (asyncio.TimeoutError, CommandFailureError) as e:
            logger.debug(f"Settle skipped: {e or 'timeout'}")

    async def _execute(self, session: DebuggerSession, index: int, action: Action) -> bool:
        """Run one action. Returns False when the action is skipped."""
        kind = action.kind

        if kind is ActionKind.COMMENT or kind.is_assertion:
            return False

        if kind is ActionKind.WAIT:
            await asyncio.sleep(max(0, action.duration_seconds or 0))
            return True

        if kind is ActionKind.CLICK:
            await self._click(session, index, action)
        elif kind in (ActionKind.TYPE, ActionKind.SELECT):
            await self._set_value(session, index, action)
        else:
            return False

        await asyncio.sleep(self._settle_delay)
        return True

    async def _click(self, session: DebuggerSession, index: int, action: Action) -> None:
        point = await self._evaluate(session, index, action, click_point_expression(action.locator))
        if not point or not point.get("ok"):
            raise ElementNotResolvableError(
                f"Click failed: {(point or {}).get('error') or 'Unknown error'}",
                step_index=index,
                kind=action.kind.value,
                locator=action.locator,
            )

        for event_type in ("mousePressed", "mouseReleased"):
            await self._send(session, index, action, "Input.dispatchMouseEvent", {
                "type": event_type,
                "x": point["x"],
                "y": point["y"],
                "button": "left",
                "clickCount": 1,
            })

    async def _set_value(self, session: DebuggerSession, index: int, action: Action) -> None:
        expression = set_value_expression(action.locator, action.value or "")
        outcome = await self._evaluate(session, index, action, expression)
        if outcome and outcome.get("ok"):
            return

        verb = "Type" if action.kind is ActionKind.TYPE else "Select"
        outcome = outcome or {}
        error_cls = UnsupportedElementKindError if outcome.get("reason") == "unsupported" else ElementNotResolvableError
        raise error_cls(
            f"{verb} failed: {outcome.get('error') or 'Unknown error'}",
            step_index=index,
            kind=action.kind.value,
            locator=action.locator,
        )

    async def _evaluate(self, session: DebuggerSession, index: int, action: Action, expression: str) -> Any:
        response = await self._send(session, index, action, "Runtime.evaluate", {
            "expression": expression,
            "returnByValue": True,
            "awaitPromise": True,
            "userGesture": True,
        })
        if response.get("exceptionDetails"):
            details = response["exceptionDetails"]
            text = (details.get("exception") or {}).get("description") or details.get("text") or "Script exception"
            raise CommandFailureError(
                text,
                method="Runtime.evaluate",
                step_index=index,
                kind=action.kind.value,
                locator=action.locator,
            )
        return (response.get("result") or {}).get("value")

    async def _send(
        self,
        session: DebuggerSession,
        index: int,
        action: Action,
        method: str,
        params: Dict[str, Any],
    ) -> Dict[str, Any]:
        try:
            return await session.send(method, params) or {}
        except CommandFailureError as e:
            if e.step_index is not None:
                raise
            raise CommandFailureError(
                e.message,
                method=method,
                step_index=index,
                kind=action.kind.value,
                locator=action.locator,
            )
