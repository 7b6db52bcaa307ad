"""
DOM Event Capture - Turn page events into recorded actions.

The in-page script forwards clicks and value changes with a snapshot of
the document. Gating on the recorder state, locator synthesis and action
construction all happen here.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from recorder_studio.exceptions import NoLocatorError
from recorder_studio.recorder.actions import Action, ActionKind
from recorder_studio.recorder.messages import (
    CAPTURE_CHANNEL,
    LOG_CHANNEL,
    ActionRecorded,
    ArmAssertion,
    Disarm,
    MessageBus,
    SetRecording,
)
from recorder_studio.recorder.state import AssertionKind, RecorderContext, RecorderState
from recorder_studio.selector import DomSnapshot, SelectorSynthesizer

logger = logging.getLogger(__name__)

TRANSPARENT_COLORS = frozenset({"transparent", "rgba(0, 0, 0, 0)"})
NO_LOCATOR_MESSAGE = "No selector found for the selected element, please contact the developers"

AlertCallback = Callable[[str], Awaitable[None]]
StateListener = Callable[[RecorderState], Any]


# =============================================================================
# EVENT PAYLOADS
# =============================================================================

class AncestorStyle(BaseModel):
    """Computed background of one ancestor, innermost first."""
    tag: str
    background_color: str = Field(alias="backgroundColor")

    model_config = ConfigDict(populate_by_name=True)


class ClickEvent(BaseModel):
    """Click forwarded by the capture script."""
    type: Literal["click"] = "click"
    dom: Optional[Dict[str, Any]] = None
    path: Optional[List[int]] = None
    node_type: str = Field(default="element", alias="nodeType")
    tag: str = ""
    text: str = ""
    color: Optional[str] = None
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    ancestors: List[AncestorStyle] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ChangeEvent(BaseModel):
    """Value change (input, textarea, select) or content-editable focus-out."""
    type: Literal["change", "contenteditable"] = "change"
    dom: Dict[str, Any]
    path: List[int]
    tag: str
    value: str = ""
    placeholder: Optional[str] = None
    option_text: Optional[str] = Field(default=None, alias="optionText")

    model_config = ConfigDict(populate_by_name=True)


CaptureEvent = Union[ClickEvent, ChangeEvent]


def truncate_text(text: str, max_length: int = 40) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut with '...'."""
    return text[:max_length] + "..." if len(text) > max_length else text


def is_transparent(color: Optional[str]) -> bool:
    return color is None or color.strip() in TRANSPARENT_COLORS


def parse_event(raw: Dict[str, Any]) -> CaptureEvent:
    """
    Validate a raw payload from the page.

    Raises:
        pydantic.ValidationError: If the payload is malformed
    """
    if raw.get("type") == "click":
        return ClickEvent.model_validate(raw)
    return ChangeEvent.model_validate(raw)


# =============================================================================
# CAPTURE
# =============================================================================

class DomEventCapture:
    """
    Receiver of the ``capture`` channel and producer of recorded actions.

    Example:
        >>> bus = MessageBus()
        >>> capture = DomEventCapture(bus)
        >>> await bus.publish(CAPTURE_CHANNEL, SetRecording(True))
        >>> action = await capture.handle_event(payload)
    """

    def __init__(
        self,
        bus: MessageBus,
        context: Optional[RecorderContext] = None,
        alert: Optional[AlertCallback] = None,
        description_max_length: int = 40,
    ):
        self._bus = bus
        self._context = context or RecorderContext()
        self._alert = alert
        self._max_length = description_max_length
        self._state_listeners: List[StateListener] = []

        bus.subscribe(CAPTURE_CHANNEL, SetRecording, self._on_control)
        bus.subscribe(CAPTURE_CHANNEL, ArmAssertion, self._on_control)
        bus.subscribe(CAPTURE_CHANNEL, Disarm, self._on_control)

    @property
    def context(self) -> RecorderContext:
        return self._context

    @property
    def state(self) -> RecorderState:
        return self._context.state

    def set_alert(self, alert: Optional[AlertCallback]) -> None:
        """Set how the user is told that an element cannot be recorded."""
        self._alert = alert

    def on_state_change(self, listener: StateListener) -> None:
        """Register a listener called with the new state after each transition."""
        self._state_listeners.append(listener)

    async def _on_control(self, message) -> None:
        previous = self._context.state
        state = self._context.apply(message)
        if state == previous:
            return
        if isinstance(message, SetRecording):
            logger.info(f"Recording {'resumed' if message.recording else 'paused'}")
        elif isinstance(message, ArmAssertion) and state.is_armed:
            logger.info(f"Armed {state.armed.value} assertion")
        for listener in self._state_listeners:
            result = listener(state)
            if inspect.isawaitable(result):
                await result

    async def handle_event(self, raw: Dict[str, Any]) -> Optional[Action]:
        """
        Entry point for payloads from the page binding.

        Malformed payloads are logged and dropped.
        """
        try:
            event = parse_event(raw)
        except ValidationError as e:
            logger.warning(f"Dropping malformed capture event: {e.error_count()} errors")
            logger.debug(f"Malformed payload: {raw!r}")
            return None

        if isinstance(event, ClickEvent):
            return await self.handle_click(event)
        return await self.handle_change(event)

    async def handle_click(self, event: ClickEvent) -> Optional[Action]:
        """
        Record a click, or an assertion when one is armed.

        The page script already swallowed clicks it could not place (non-element
        target or detached node). A locator failure here, such as a path that
        does not resolve in the snapshot, only alerts the user: the click has
        reached the page by the time the event arrives.
        """
        state = self._context.state
        if state.is_idle:
            return None

        try:
            locator = self._locate(event)
        except NoLocatorError as e:
            logger.error(f"Click not recorded: {e}")
            if self._alert:
                await self._alert(NO_LOCATOR_MESSAGE)
            return None

        if state.armed is None:
            label = event.text.strip() or event.tag.lower()
            action = Action(
                kind=ActionKind.CLICK,
                locator=locator,
                description=f'Click on "{truncate_text(label, self._max_length)}"',
            )
        else:
            action = self._assertion(state.armed, locator, event)

        await self._emit(action)
        if state.armed is not None:
            await self._bus.publish(CAPTURE_CHANNEL, Disarm())
        return action

    async def handle_change(self, event: ChangeEvent) -> Optional[Action]:
        """Record typing into a field or a dropdown selection."""
        state = self._context.state
        if not state.recording or state.is_armed:
            return None

        tag = event.tag.lower()
        if event.type == "contenteditable":
            kind = ActionKind.TYPE
            description = f'Type "{event.value}" into contenteditable {tag}'
        elif tag in ("input", "textarea"):
            kind = ActionKind.TYPE
            description = f'Type "{event.value}" into {event.placeholder or tag}'
        elif tag == "select":
            kind = ActionKind.SELECT
            option = event.option_text if event.option_text is not None else event.value
            description = f'Select "{option}" from dropdown'
        else:
            logger.debug(f"Ignoring change on <{tag}>")
            return None

        try:
            locator = self._locate(event)
        except NoLocatorError as e:
            logger.error(f"Change not recorded: {e}")
            return None

        action = Action(kind=kind, locator=locator, value=event.value, description=description)
        await self._emit(action)
        return action

    def _locate(self, event: CaptureEvent) -> str:
        if getattr(event, "node_type", "element") != "element" or event.dom is None or event.path is None:
            raise NoLocatorError(
                "Event target is not an element",
                node_type=getattr(event, "node_type", None),
            )
        snapshot = DomSnapshot.from_payload(event.dom)
        element = snapshot.resolve(event.path)
        return SelectorSynthesizer(snapshot).synthesize(element)

    def _assertion(self, kind: AssertionKind, locator: str, event: ClickEvent) -> Action:
        if kind is AssertionKind.TEXT:
            text = event.text.strip()
            return Action(
                kind=ActionKind.ASSERT_TEXT,
                locator=locator,
                value=text,
                description=f'Assert text "{truncate_text(text, self._max_length)}" exists',
            )

        if kind is AssertionKind.COLOR:
            color = event.color or ""
            return Action(
                kind=ActionKind.ASSERT_COLOR,
                locator=locator,
                value=color,
                description=f'Assert color is "{color}"',
            )

        if kind is AssertionKind.BACKGROUND_COLOR:
            color, source = self._background(event)
            if source:
                description = f'Assert inherited background color "{color}" from parent {source}'
            else:
                description = f'Assert background color is "{color}"'
            return Action(
                kind=ActionKind.ASSERT_BACKGROUND_COLOR,
                locator=locator,
                value=color,
                description=description,
                inherited_from=source,
            )

        return Action(
            kind=ActionKind.ASSERT_VISIBLE,
            locator=locator,
            description="Assert element is visible",
        )

    @staticmethod
    def _background(event: ClickEvent):
        """Own background, or the first non-transparent ancestor's and its tag."""
        own = event.background_color or "rgba(0, 0, 0, 0)"
        if not is_transparent(own):
            return own, None
        for ancestor in event.ancestors:
            if ancestor.tag.lower() == "body":
                break
            if not is_transparent(ancestor.background_color):
                return ancestor.background_color, ancestor.tag.lower()
        return own, None

    async def _emit(self, action: Action) -> None:
        logger.info(f"Recorded {action.kind.value}: {action.description}")
        await self._bus.publish(LOG_CHANNEL, ActionRecorded(action))
