"""
Raw Chrome DevTools Protocol over a websocket.

Used to replay against a Chrome started with ``--remote-debugging-port``
without Playwright owning the browser.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
import websockets

from recorder_studio.exceptions import CommandFailureError, SessionAttachError
from recorder_studio.replay.transport import DebuggerSession, DebuggerTarget

logger = logging.getLogger(__name__)


async def discover_active_tab(host: str = "localhost", port: int = 9222, timeout_s: float = 5.0) -> str:
    """
    Find the websocket URL of the active page tab.

    Chrome lists targets most recently focused first, so the first ``page``
    entry of ``/json/list`` is the active tab.

    Raises:
        SessionAttachError: If the endpoint is unreachable or lists no page
    """
    url = f"http://{host}:{port}/json/list"
    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            response = await client.get(url)
            response.raise_for_status()
            targets = response.json()
    except httpx.HTTPError as e:
        raise SessionAttachError(f"DevTools endpoint {url} unavailable: {e}")
    except ValueError as e:
        raise SessionAttachError(f"DevTools endpoint {url} returned invalid JSON: {e}")

    for target in targets if isinstance(targets, list) else []:
        if target.get("type") == "page" and target.get("webSocketDebuggerUrl"):
            logger.info(f"Active tab: {target.get('title') or target.get('url')}")
            return target["webSocketDebuggerUrl"]
    raise SessionAttachError(f"No page target listed at {url}")


class WebSocketDebuggerSession(DebuggerSession):
    """
    One websocket connection to a page target.

    Responses are matched to commands by id; events are fanned out to
    waiters registered with wait_for_event().
    """

    def __init__(self, ws, command_timeout_s: float = 15.0):
        self._ws = ws
        self._timeout = command_timeout_s
        self._next_id = 0
        self._pending: Dict[int, asyncio.Future] = {}
        self._waiters: Dict[str, List[asyncio.Future]] = {}
        self._listen_task: Optional[asyncio.Task] = None
        self.detached = False

    def start(self) -> None:
        self._listen_task = asyncio.create_task(self._listen_loop())

    async def _listen_loop(self) -> None:
        try:
            async for raw in self._ws:
                self._handle_message(raw)
        except websockets.ConnectionClosed as e:
            logger.debug(f"DevTools websocket closed: {e}")
        finally:
            self._fail_pending(ConnectionError("DevTools websocket closed"))

    def _handle_message(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON from DevTools: {e}")
            return

        if "id" in message:
            future = self._pending.pop(message["id"], None)
            if future is None or future.done():
                return
            if "error" in message:
                future.set_exception(CommandFailureError(message["error"].get("message", "Protocol error")))
            else:
                future.set_result(message.get("result", {}))
            return

        method = message.get("method")
        for waiter in self._waiters.pop(method, []):
            if not waiter.done():
                waiter.set_result(message.get("params", {}))

    def _fail_pending(self, error: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()

    async def send(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if self.detached:
            raise CommandFailureError("Session is detached", method=method)
        self._next_id += 1
        message_id = self._next_id
        future = asyncio.get_running_loop().create_future()
        self._pending[message_id] = future

        try:
            await self._ws.send(json.dumps({"id": message_id, "method": method, "params": params or {}}))
            return await asyncio.wait_for(future, timeout=self._timeout)
        except CommandFailureError as e:
            raise CommandFailureError(e.message, method=method)
        except asyncio.TimeoutError:
            raise CommandFailureError(f"No response within {self._timeout}s", method=method)
        except (ConnectionError, websockets.ConnectionClosed) as e:
            raise CommandFailureError(f"Connection lost: {e}", method=method)
        finally:
            self._pending.pop(message_id, None)

    async def wait_for_event(self, method: str, timeout_s: float) -> Dict[str, Any]:
        future = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(method, []).append(future)
        try:
            return await asyncio.wait_for(future, timeout=timeout_s)
        finally:
            waiters = self._waiters.get(method)
            if waiters and future in waiters:
                waiters.remove(future)

    async def detach(self) -> None:
        if self.detached:
            return
        self.detached = True
        _forget(self)
        await self._ws.close()
        if self._listen_task:
            self._listen_task.cancel()
            try:
                await self._listen_task
            except asyncio.CancelledError:
                pass
        self._fail_pending(ConnectionError("Session detached"))


# Open sessions per websocket URL
_active_sessions: Dict[str, WebSocketDebuggerSession] = {}


def _forget(session: WebSocketDebuggerSession) -> None:
    for url, active in list(_active_sessions.items()):
        if active is session:
            del _active_sessions[url]


class WebSocketDebuggerTarget(DebuggerTarget):
    """
    Replay target reached through a DevTools websocket URL.

    Example:
        >>> ws_url = await discover_active_tab(port=9222)
        >>> target = WebSocketDebuggerTarget(ws_url)
    """

    def __init__(
        self,
        ws_url: str,
        command_timeout_s: float = 15.0,
        connect: Optional[Callable[..., Any]] = None,
    ):
        self._ws_url = ws_url
        self._timeout = command_timeout_s
        self._connect = connect or websockets.connect

    @property
    def target_id(self) -> str:
        return self._ws_url

    async def release_stale(self) -> None:
        stale = _active_sessions.pop(self._ws_url, None)
        if stale is None or stale.detached:
            return
        try:
            await stale.detach()
            logger.debug(f"Released stale session on {self._ws_url}")
        except Exception as e:
            logger.debug(f"Stale session release failed: {e}")

    async def attach(self) -> DebuggerSession:
        try:
            ws = await self._connect(self._ws_url, max_size=None)
        except (OSError, websockets.WebSocketException) as e:
            raise SessionAttachError(f"Could not attach to {self._ws_url}: {e}")
        session = WebSocketDebuggerSession(ws, command_timeout_s=self._timeout)
        session.start()
        _active_sessions[self._ws_url] = session
        logger.debug(f"Attached to {self._ws_url}")
        return session
