"""
Actions - Recorded steps and the ordered log that holds them.

The log order is the execution order for both code generation and replay.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional

from recorder_studio.exceptions import ActionValidationError

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    """Types of recordable actions."""
    CLICK = "click"
    TYPE = "type"
    SELECT = "select"
    ASSERT_TEXT = "assertion-text"
    ASSERT_COLOR = "assertion-color"
    ASSERT_BACKGROUND_COLOR = "assertion-background-color"
    ASSERT_VISIBLE = "assertion-visible"
    COMMENT = "comment"
    WAIT = "wait"

    @property
    def needs_locator(self) -> bool:
        return self not in (ActionKind.COMMENT, ActionKind.WAIT)

    @property
    def is_assertion(self) -> bool:
        return self.value.startswith("assertion-")


# Kinds used by the browser extension's stored action lists
LEGACY_KINDS = {
    "assertion": ActionKind.ASSERT_TEXT,
    "color-assertion": ActionKind.ASSERT_COLOR,
    "background-color-assertion": ActionKind.ASSERT_BACKGROUND_COLOR,
    "visible": ActionKind.ASSERT_VISIBLE,
}
LEGACY_VALUE_KEYS = ("value", "expectedText", "expectedColor", "expectedBgColor")


def _now() -> str:
    return datetime.now().isoformat()


@dataclass(frozen=True)
class Action:
    """
    One recorded step.

    Attributes:
        kind: What the step does
        description: Human-readable summary, always present
        locator: XPath of the target (absent for comment and wait)
        value: Typed text, selected value, or assertion expectation
        duration_seconds: Pause length (wait only)
        inherited_from: Ancestor tag that supplied an inherited background color
        timestamp: ISO-8601 creation time
    """
    kind: ActionKind
    description: str
    locator: Optional[str] = None
    value: Optional[str] = None
    duration_seconds: Optional[int] = None
    inherited_from: Optional[str] = None
    timestamp: str = field(default_factory=_now)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ActionKind):
            try:
                object.__setattr__(self, "kind", ActionKind(self.kind))
            except ValueError:
                raise ActionValidationError(f"Unknown action kind: {self.kind!r}", kind=str(self.kind))
        if self.kind.needs_locator and not self.locator:
            raise ActionValidationError(
                f"Action '{self.kind.value}' requires a locator",
                kind=self.kind.value,
                invalid_fields={"locator": self.locator},
            )
        if self.kind is ActionKind.WAIT:
            duration = self.duration_seconds
            if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
                raise ActionValidationError(
                    "Wait duration must be a positive number of seconds",
                    kind=self.kind.value,
                    invalid_fields={"duration_seconds": self.duration_seconds},
                )

    @classmethod
    def comment(cls, text: str) -> "Action":
        """Free-text checkpoint."""
        text = (text or "").strip()
        if not text:
            raise ActionValidationError("Comment text is required", kind=ActionKind.COMMENT.value)
        return cls(kind=ActionKind.COMMENT, description=text)

    @classmethod
    def wait(cls, seconds: int) -> "Action":
        """Fixed pause of ``seconds``."""
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            raise ActionValidationError(
                "Wait duration must be an integer",
                kind=ActionKind.WAIT.value,
                invalid_fields={"duration_seconds": seconds},
            )
        return cls(
            kind=ActionKind.WAIT,
            description=f"{seconds} second{'' if seconds == 1 else 's'}",
            duration_seconds=seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {
            "kind": self.kind.value,
            "description": self.description,
        }
        if self.locator:
            result["locator"] = self.locator
        if self.value is not None:
            result["value"] = self.value
        if self.duration_seconds is not None:
            result["duration_seconds"] = self.duration_seconds
        if self.inherited_from:
            result["inherited_from"] = self.inherited_from
        if self.timestamp:
            result["timestamp"] = self.timestamp
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        """
        Create from dictionary.

        Also reads the browser extension's format (``type``, ``selector``,
        ``expectedText`` ...), so exported extension logs can be imported.
        """
        if not isinstance(data, dict):
            raise ActionValidationError(f"Action must be an object, got {type(data).__name__}")

        if "kind" in data:
            kind = data["kind"]
            locator = data.get("locator")
            value = data.get("value")
            duration = data.get("duration_seconds")
        else:
            raw_kind = data.get("type")
            kind = LEGACY_KINDS.get(raw_kind, raw_kind)
            locator = data.get("selector")
            value = next((data[key] for key in LEGACY_VALUE_KEYS if data.get(key) is not None), None)
            duration = data.get("duration")

        if kind is None:
            raise ActionValidationError("Action has no kind", invalid_fields={"kind": None})
        if duration is not None:
            duration = _whole_seconds(duration, str(kind))

        return cls(
            kind=kind,
            description=data.get("description") or "",
            locator=locator,
            value=None if value is None else str(value),
            duration_seconds=duration,
            inherited_from=data.get("inherited_from"),
            timestamp=data.get("timestamp") or "",
        )


def _whole_seconds(raw: Any, kind: str) -> int:
    """Whole seconds from an int, an integral float or a digit string."""
    if not isinstance(raw, bool):
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
        if isinstance(raw, str) and raw.strip().isdigit():
            return int(raw)
    raise ActionValidationError(
        "Wait duration must be a whole number of seconds",
        kind=kind,
        invalid_fields={"duration_seconds": raw},
    )


ChangeListener = Callable[[List[Action]], None]


class ActionLog:
    """
    Ordered, mutable sequence of actions.

    Every mutation notifies change listeners with the full current list,
    which is how the log is mirrored to persistence (last write wins).

    Example:
        >>> log = ActionLog()
        >>> log.append(Action(kind=ActionKind.CLICK, locator="//body", description="Click"))
        >>> log.insert_wait(2)
        >>> len(log)
        2
    """

    def __init__(self, actions: Optional[List[Action]] = None):
        self._actions: List[Action] = list(actions or [])
        self._listeners: List[ChangeListener] = []
        self.record_name: Optional[str] = None
        self.dirty = False

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(list(self._actions))

    def __getitem__(self, index: int) -> Action:
        return self._actions[index]

    @property
    def actions(self) -> List[Action]:
        """Copy of the current actions."""
        return list(self._actions)

    def on_change(self, listener: ChangeListener) -> None:
        """Register a listener called after every mutation."""
        self._listeners.append(listener)

    def append(self, action: Action) -> None:
        self._actions.append(action)
        self._changed(f"append {action.kind.value}")

    def delete(self, index: int) -> Action:
        """Remove and return the action at ``index``."""
        self._check_index(index)
        action = self._actions.pop(index)
        self._changed(f"delete #{index}")
        return action

    def move(self, from_index: int, to_index: int) -> None:
        """Drag-and-drop reorder: remove at ``from_index``, insert at ``to_index``."""
        self._check_index(from_index)
        self._check_index(to_index)
        if from_index == to_index:
            return
        action = self._actions.pop(from_index)
        self._actions.insert(to_index, action)
        self._changed(f"move #{from_index} -> #{to_index}")

    def insert_comment(self, text: str) -> Action:
        action = Action.comment(text)
        self.append(action)
        return action

    def insert_wait(self, seconds: int) -> Action:
        action = Action.wait(seconds)
        self.append(action)
        return action

    def replace(self, actions: List[Action], record_name: Optional[str] = None) -> None:
        """Bulk replace, e.g. when a named record is loaded."""
        self._actions = list(actions)
        self.record_name = record_name
        self._changed("replace", dirty=False)

    def clear(self) -> None:
        self._actions = []
        self.record_name = None
        self._changed("clear", dirty=False)

    def mark_saved(self, record_name: str) -> None:
        self.record_name = record_name
        self.dirty = False

    def to_list(self) -> List[Dict[str, Any]]:
        return [action.to_dict() for action in self._actions]

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._actions):
            raise IndexError(f"Action index {index} out of range (log has {len(self._actions)} actions)")

    def _changed(self, reason: str, dirty: bool = True) -> None:
        self.dirty = dirty
        logger.debug(f"Action log {reason}: {len(self._actions)} actions")
        snapshot = list(self._actions)
        for listener in self._listeners:
            listener(snapshot)
