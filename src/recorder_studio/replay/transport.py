"""
Debugger transports - How the replay engine talks to a browser tab.

A DebuggerTarget identifies one tab and opens DebuggerSessions on it.
A session sends Chrome DevTools Protocol commands and waits for events.
"""

import asyncio
import logging
import weakref
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

from recorder_studio.exceptions import CommandFailureError, SessionAttachError

if TYPE_CHECKING:
    from playwright.async_api import CDPSession, Page

logger = logging.getLogger(__name__)


class DebuggerSession(ABC):
    """An attached protocol session bound to one tab."""

    @abstractmethod
    async def send(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Send a protocol command and return its result.

        Raises:
            CommandFailureError: If the browser reports an error
        """
        ...

    @abstractmethod
    async def wait_for_event(self, method: str, timeout_s: float) -> Dict[str, Any]:
        """
        Wait for the next event named ``method``.

        Raises:
            asyncio.TimeoutError: If no such event arrives in time
        """
        ...

    @abstractmethod
    async def detach(self) -> None:
        """Release the session."""
        ...


class DebuggerTarget(ABC):
    """A tab that replay sessions can attach to."""

    @property
    @abstractmethod
    def target_id(self) -> str:
        ...

    @abstractmethod
    async def release_stale(self) -> None:
        """Detach a session left over from an earlier run on this tab, if any."""
        ...

    @abstractmethod
    async def attach(self) -> DebuggerSession:
        """
        Open a new session.

        Raises:
            SessionAttachError: If the tab cannot be attached
        """
        ...


# =============================================================================
# PLAYWRIGHT
# =============================================================================

class PlaywrightDebuggerSession(DebuggerSession):
    """Session over a Playwright CDPSession."""

    def __init__(self, cdp: "CDPSession"):
        self._cdp = cdp
        self.detached = False

    async def send(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            return await self._cdp.send(method, params or {})
        except Exception as e:
            raise CommandFailureError(str(e), method=method)

    async def wait_for_event(self, method: str, timeout_s: float) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def on_event(params: Dict[str, Any]) -> None:
            if not future.done():
                future.set_result(params or {})

        self._cdp.on(method, on_event)
        try:
            return await asyncio.wait_for(future, timeout=timeout_s)
        finally:
            self._cdp.remove_listener(method, on_event)

    async def detach(self) -> None:
        if self.detached:
            return
        self.detached = True
        _forget(self)
        await self._cdp.detach()


# Sessions still attached per page, so a new replay can release them first
_active_sessions: "weakref.WeakKeyDictionary[Page, PlaywrightDebuggerSession]" = weakref.WeakKeyDictionary()


def _forget(session: PlaywrightDebuggerSession) -> None:
    for page, active in list(_active_sessions.items()):
        if active is session:
            del _active_sessions[page]


class PlaywrightDebuggerTarget(DebuggerTarget):
    """
    Replay target for a Playwright page.

    Example:
        >>> target = PlaywrightDebuggerTarget(page)
        >>> result = await ReplayEngine(target).run(actions)
    """

    def __init__(self, page: "Page"):
        self._page = page

    @property
    def target_id(self) -> str:
        return self._page.url or "about:blank"

    async def release_stale(self) -> None:
        stale = _active_sessions.pop(self._page, None)
        if stale is None or stale.detached:
            return
        try:
            await stale.detach()
            logger.debug("Released stale debugger session")
        except Exception as e:
            logger.debug(f"Stale session release failed: {e}")

    async def attach(self) -> DebuggerSession:
        try:
            cdp = await self._page.context.new_cdp_session(self._page)
        except Exception as e:
            raise SessionAttachError(f"Could not attach to {self.target_id}: {e}")
        session = PlaywrightDebuggerSession(cdp)
        _active_sessions[self._page] = session
        return session
