"""
Studio configuration.

``get_settings()`` returns a process-wide ``Settings`` loaded on first use;
``load_config()`` builds a fresh one. Any field can be set from the
environment, e.g.::

    RECORDER_STUDIO__RECORDER__DIALECT=puppeteer
    RECORDER_STUDIO__REPLAY__SETTLE_DELAY_MS=500
    RECORDER_STUDIO__STORAGE__PATH=./records.json
"""

from typing import Optional

from recorder_studio.config.loader import CONFIG_ENV_VAR, ConfigLoader, load_config
from recorder_studio.config.settings import (
    BrowserSettings,
    LoggingSettings,
    RecorderSettings,
    ReplaySettings,
    Settings,
    StorageSettings,
)

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Cached settings; call ``reset_settings()`` to force a reload."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "BrowserSettings",
    "RecorderSettings",
    "ReplaySettings",
    "StorageSettings",
    "LoggingSettings",
    "CONFIG_ENV_VAR",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
