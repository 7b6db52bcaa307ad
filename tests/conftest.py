"""
Pytest configuration and fixtures.
"""

import pytest


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    """Isolate every test from config files, .env files and cached settings."""
    from recorder_studio.config import reset_settings

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RECORDER_STUDIO_CONFIG", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    """Provide test settings with no settle delays."""
    from recorder_studio.config import Settings, ReplaySettings

    return Settings(
        replay=ReplaySettings(settle_delay_ms=0, settle_timeout_ms=0),
    )


@pytest.fixture
def memory_store():
    """Provide an empty in-memory store."""
    from recorder_studio.storage import MemoryStore

    return MemoryStore()


@pytest.fixture
def sample_actions():
    """A short log covering click, type, assertion, wait and comment."""
    from recorder_studio.recorder.actions import Action, ActionKind

    return [
        Action(kind=ActionKind.CLICK, locator='//*[@id="login"]', description='Click on "Log in"'),
        Action(
            kind=ActionKind.TYPE,
            locator='//*[local-name()="input"][@name="user"]',
            value="alice",
            description='Type "alice" into Username',
        ),
        Action(
            kind=ActionKind.ASSERT_TEXT,
            locator='//*[@id="greeting"]',
            value="Welcome",
            description='Assert text "Welcome" exists',
        ),
        Action.wait(2),
        Action.comment("Logged in"),
    ]


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging() replaces root handlers; put the test harness's back."""
    import logging

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
