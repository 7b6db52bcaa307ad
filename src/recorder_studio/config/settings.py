"""
Settings models, one section per component.

    >>> from recorder_studio.config import load_config
    >>> load_config().recorder.dialect
    'playwright'
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserSettings(BaseModel):
    """Browser launched by ``recorder-studio record``; ``channel=None`` means bundled Chromium."""
    headless: bool = False
    channel: Optional[str] = None
    timeout_ms: int = Field(default=30000, ge=1000, le=300000)
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)


class RecorderSettings(BaseModel):
    """
    Recording and code generation settings.
    
    Attributes:
        dialect: Default code generation dialect
        page_name: Page variable name used in generated code
        description_max_length: Truncation length for text in descriptions
    """
    dialect: Literal["playwright", "puppeteer", "playwright-python"] = "playwright"
    page_name: str = "page"
    description_max_length: int = Field(default=40, ge=10, le=200)


class ReplaySettings(BaseModel):
    """
    Replay engine settings.
    
    Attributes:
        settle_delay_ms: Fixed pause after click/type/select
        settle_timeout_ms: Max wait for a lifecycle event after attach
        command_timeout_s: Timeout for a single protocol command
        devtools_host: Host of the DevTools HTTP endpoint
        devtools_port: Port of the DevTools HTTP endpoint
    """
    settle_delay_ms: int = Field(default=300, ge=0, le=10000)
    settle_timeout_ms: int = Field(default=500, ge=0, le=15000)
    command_timeout_s: float = Field(default=15.0, gt=0, le=300)
    devtools_host: str = "localhost"
    devtools_port: int = Field(default=9222, ge=1, le=65535)


class StorageSettings(BaseModel):
    """
    Persistence settings.
    
    Attributes:
        path: JSON file backing the key-value store
    """
    path: str = "./recorder_studio.json"


class LoggingSettings(BaseModel):
    """Console logging goes through Rich; ``file`` adds a plain or JSON-lines file log."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    All studio settings.

    Values passed to the constructor beat ``RECORDER_STUDIO__`` environment
    variables, which beat the section defaults. ``ConfigLoader`` passes the
    config file in as constructor values.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="RECORDER_STUDIO__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
    
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    recorder: RecorderSettings = Field(default_factory=RecorderSettings)
    replay: ReplaySettings = Field(default_factory=ReplaySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    
    debug: bool = False
    
    def merge_with(self, overrides: Dict[str, Any]) -> "Settings":
        """Copy with ``overrides`` merged in section by section."""
        return Settings(**_deep_merge(self.model_dump(), overrides))


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base
