"""
Control messages and the in-process message bus.

Each receiver owns one named channel and registers a handler per message
type. Publishing to a channel dispatches on the exact message class.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Type, Union

from recorder_studio.recorder.actions import Action
from recorder_studio.recorder.state import AssertionKind

logger = logging.getLogger(__name__)

CAPTURE_CHANNEL = "capture"
LOG_CHANNEL = "log"


@dataclass(frozen=True)
class SetRecording:
    """Turn recording on or off."""
    recording: bool


@dataclass(frozen=True)
class ArmAssertion:
    """Make the next click capture an assertion of ``kind``."""
    kind: AssertionKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", AssertionKind(self.kind))


@dataclass(frozen=True)
class Disarm:
    """Return to plain recording after an assertion was captured."""


@dataclass(frozen=True)
class ActionRecorded:
    """A captured action for the log manager."""
    action: Action


Message = Union[SetRecording, ArmAssertion, Disarm, ActionRecorded]
Handler = Callable[[Any], Any]


class MessageBus:
    """
    Named channels with per-type handlers.

    Example:
        >>> bus = MessageBus()
        >>> bus.subscribe(LOG_CHANNEL, ActionRecorded, lambda m: log.append(m.action))
        >>> await bus.publish(LOG_CHANNEL, ActionRecorded(action))
    """

    def __init__(self):
        self._channels: Dict[str, Dict[Type, List[Handler]]] = {}

    def subscribe(self, channel: str, message_type: Type, handler: Handler) -> None:
        """Register ``handler`` for ``message_type`` on ``channel``."""
        handlers = self._channels.setdefault(channel, {})
        handlers.setdefault(message_type, []).append(handler)
        logger.debug(f"Subscribed {message_type.__name__} on '{channel}'")

    def has_channel(self, channel: str) -> bool:
        return channel in self._channels

    async def publish(self, channel: str, message: Message) -> int:
        """
        Deliver ``message`` to the handlers of its type on ``channel``.

        Handlers run in registration order; coroutine results are awaited
        before the next handler runs.

        Returns:
            Number of handlers that received the message
        """
        handlers = self._channels.get(channel, {}).get(type(message), [])
        if not handlers:
            logger.debug(f"No handler for {type(message).__name__} on '{channel}'")
            return 0

        for handler in list(handlers):
            result = handler(message)
            if inspect.isawaitable(result):
                await result
        return len(handlers)
