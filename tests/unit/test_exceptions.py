"""
Tests for the exception hierarchy.
"""

import pytest

from recorder_studio.exceptions import (
    ActionValidationError,
    AmbiguousLocatorError,
    CommandFailureError,
    ElementNotResolvableError,
    NoLocatorError,
    RecordExistsError,
    RecordNotFoundError,
    RecorderStudioError,
    ReplayError,
    SelectorError,
    StorageError,
    UnsupportedElementKindError,
)


class TestHierarchy:
    """Every library error is catchable as RecorderStudioError."""

    @pytest.mark.parametrize("error", [
        NoLocatorError("no locator"),
        AmbiguousLocatorError("//p", 2),
        ActionValidationError("bad"),
        RecordExistsError("login"),
        RecordNotFoundError("login"),
        ElementNotResolvableError("gone"),
        CommandFailureError("closed"),
    ])
    def test_base_class(self, error):
        assert isinstance(error, RecorderStudioError)

    def test_groups(self):
        assert issubclass(AmbiguousLocatorError, SelectorError)
        assert issubclass(RecordNotFoundError, StorageError)
        assert issubclass(UnsupportedElementKindError, ReplayError)


class TestMessages:
    """Test error messages and attributes."""

    def test_details_in_str(self):
        error = RecorderStudioError("Something failed", {"key": "value"})
        assert str(error) == "Something failed - Details: {'key': 'value'}"

    def test_plain_str(self):
        assert str(RecorderStudioError("Something failed")) == "Something failed"

    def test_replay_error_names_step(self):
        error = ElementNotResolvableError(
            "Click failed: Element not found for XPath.",
            step_index=3,
            kind="click",
            locator="//button",
        )

        assert error.message == "Step 3 (click) failed: Click failed: Element not found for XPath."
        assert error.step_index == 3
        assert error.locator == "//button"

    def test_command_failure_method(self):
        error = CommandFailureError("timeout", method="Runtime.evaluate", step_index=1, kind="type")

        assert error.method == "Runtime.evaluate"
        assert error.message.startswith("Step 1 (type) failed")

    def test_ambiguous_locator_count(self):
        error = AmbiguousLocatorError("//div", 4)
        assert error.match_count == 4
        assert error.locator == "//div"

    def test_record_errors_keep_name(self):
        assert RecordExistsError("login").name == "login"
        assert "login" in RecordNotFoundError("login").message
