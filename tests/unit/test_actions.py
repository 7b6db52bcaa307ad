"""
Tests for actions and the action log.
"""

import pytest

from recorder_studio.exceptions import ActionValidationError
from recorder_studio.recorder.actions import Action, ActionKind, ActionLog


def click(locator="//body", description="Click on body"):
    return Action(kind=ActionKind.CLICK, locator=locator, description=description)


class TestAction:
    """Test Action validation and serialization."""

    def test_kind_coerced_from_string(self):
        action = Action(kind="assertion-text", locator="//p", value="Done", description="Assert")
        assert action.kind is ActionKind.ASSERT_TEXT
        assert action.kind.is_assertion

    def test_unknown_kind(self):
        with pytest.raises(ActionValidationError):
            Action(kind="hover", locator="//p", description="Hover")

    def test_locator_required(self):
        with pytest.raises(ActionValidationError) as exc_info:
            Action(kind=ActionKind.CLICK, description="Click")
        assert exc_info.value.kind == "click"

    def test_comment_needs_no_locator(self):
        action = Action.comment("  checkpoint  ")

        assert action.kind is ActionKind.COMMENT
        assert action.description == "checkpoint"
        assert action.locator is None

    def test_empty_comment_rejected(self):
        with pytest.raises(ActionValidationError):
            Action.comment("   ")

    @pytest.mark.parametrize("seconds, description", [(1, "1 second"), (3, "3 seconds")])
    def test_wait(self, seconds, description):
        action = Action.wait(seconds)

        assert action.duration_seconds == seconds
        assert action.description == description

    @pytest.mark.parametrize("seconds", [0, -2, 1.5, True])
    def test_invalid_wait(self, seconds):
        with pytest.raises(ActionValidationError):
            Action.wait(seconds)

    def test_to_dict_omits_absent_fields(self):
        data = click().to_dict()

        assert data["kind"] == "click"
        assert data["locator"] == "//body"
        assert "value" not in data
        assert "duration_seconds" not in data

    def test_from_dict_round_trip(self):
        original = Action(
            kind=ActionKind.ASSERT_BACKGROUND_COLOR,
            locator="//span",
            value="rgb(255, 255, 255)",
            description="Assert inherited background color",
            inherited_from="div",
        )
        assert Action.from_dict(original.to_dict()) == original

    def test_from_legacy_dict(self):
        action = Action.from_dict({
            "type": "assertion",
            "selector": '//*[@id="msg"]',
            "expectedText": "Saved",
            "description": 'Assert text "Saved" exists',
        })

        assert action.kind is ActionKind.ASSERT_TEXT
        assert action.locator == '//*[@id="msg"]'
        assert action.value == "Saved"

    def test_from_legacy_wait(self):
        action = Action.from_dict({"type": "wait", "duration": "5", "description": "5 seconds"})
        assert action.duration_seconds == 5

    @pytest.mark.parametrize("duration", [True, 0, "abc"])
    def test_constructor_rejects_bad_duration(self, duration):
        with pytest.raises(ActionValidationError):
            Action(kind=ActionKind.WAIT, duration_seconds=duration, description="wait")

    def test_from_dict_accepts_whole_float(self):
        action = Action.from_dict({"kind": "wait", "duration_seconds": 2.0, "description": "2 seconds"})
        assert action.duration_seconds == 2

    @pytest.mark.parametrize("duration", [2.7, True, "2.5", "-1"])
    def test_from_dict_rejects_fractional_duration(self, duration):
        with pytest.raises(ActionValidationError):
            Action.from_dict({"kind": "wait", "duration_seconds": duration, "description": "wait"})

    def test_from_dict_without_kind(self):
        with pytest.raises(ActionValidationError):
            Action.from_dict({"description": "nothing"})


class TestActionLog:
    """Test log mutations."""

    def test_append_and_order(self):
        log = ActionLog()
        first, second = click(description="first"), click(description="second")

        log.append(first)
        log.append(second)

        assert log.actions == [first, second]
        assert log.dirty

    def test_delete(self):
        log = ActionLog([click(description="a"), click(description="b")])

        removed = log.delete(0)

        assert removed.description == "a"
        assert [a.description for a in log] == ["b"]

    @pytest.mark.parametrize("index", [-1, 2, True])
    def test_delete_invalid_index(self, index):
        log = ActionLog([click(), click()])
        with pytest.raises(IndexError):
            log.delete(index)

    def test_move(self):
        log = ActionLog([click(description=name) for name in "abcd"])

        log.move(0, 2)

        assert [a.description for a in log] == ["b", "c", "a", "d"]

    def test_move_invalid_index(self):
        log = ActionLog([click()])
        with pytest.raises(IndexError):
            log.move(0, 1)

    def test_insert_comment_and_wait(self):
        log = ActionLog([click()])

        log.insert_comment("after click")
        log.insert_wait(2)

        assert [a.kind for a in log] == [ActionKind.CLICK, ActionKind.COMMENT, ActionKind.WAIT]

    def test_listeners_receive_full_list(self):
        log = ActionLog()
        snapshots = []
        log.on_change(snapshots.append)

        log.append(click(description="a"))
        log.append(click(description="b"))
        log.clear()

        assert [len(s) for s in snapshots] == [1, 2, 0]

    def test_replace_is_clean(self):
        log = ActionLog()
        log.append(click())

        log.replace([click(description="loaded")], record_name="login")

        assert not log.dirty
        assert log.record_name == "login"
        assert len(log) == 1

    def test_mark_saved(self):
        log = ActionLog()
        log.append(click())

        log.mark_saved("smoke")

        assert not log.dirty
        assert log.record_name == "smoke"

    def test_to_list(self, sample_actions):
        log = ActionLog(sample_actions)
        assert [item["kind"] for item in log.to_list()] == [
            "click", "type", "assertion-text", "wait", "comment",
        ]
