"""
Config loading for the studio.

Sources, from strongest to weakest:

1. Keyword overrides given to ``load_config``
2. The YAML config file
3. ``RECORDER_STUDIO__*`` environment variables (a ``.env`` file is read first)
4. Model defaults

The config file is either passed explicitly, named by ``RECORDER_STUDIO_CONFIG``
or found in one of ``SEARCH_PATHS``.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from recorder_studio.config.settings import Settings
from recorder_studio.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RECORDER_STUDIO_CONFIG"

SEARCH_PATHS: List[Path] = [
    Path("recorder_studio.yaml"),
    Path("recorder_studio.yml"),
    Path("config") / "recorder_studio.yaml",
    Path.home() / ".config" / "recorder-studio" / "config.yaml",
]

DOTENV_FILES = (".env", ".env.local")

PathLike = Union[str, Path]


class ConfigLoader:
    """
    Resolves the config file and builds a ``Settings`` from it.

    Args:
        config_path: Explicit config file. Unlike the search paths it must
            exist, otherwise ``load()`` raises ``ConfigurationError``.
    """

    def __init__(self, config_path: Optional[PathLike] = None):
        self.config_path = Path(config_path) if config_path else None

    def resolve_path(self) -> Optional[Path]:
        explicit = self.config_path
        if explicit is None and os.environ.get(CONFIG_ENV_VAR):
            explicit = Path(os.environ[CONFIG_ENV_VAR])

        if explicit is not None:
            if not explicit.is_file():
                raise ConfigurationError(f"Config file not found: {explicit}")
            return explicit

        return next((path for path in SEARCH_PATHS if path.is_file()), None)

    @staticmethod
    def read_file(path: Path) -> Dict[str, Any]:
        """Parse a YAML config file; an empty file is an empty mapping."""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping, got {type(data).__name__}"
            )
        return data

    def load(
        self,
        env_file: Optional[PathLike] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Settings:
        _load_env_file(env_file)

        values: Dict[str, Any] = {}
        path = self.resolve_path()
        if path is not None:
            logger.debug(f"Loading config from {path}")
            values = self.read_file(path)

        try:
            # File values go in as init kwargs, which outrank env vars
            settings = Settings(**values)
            if overrides:
                settings = settings.merge_with(overrides)
        except ValidationError as e:
            source = path if path is not None else "overrides"
            raise ConfigurationError(f"Invalid configuration ({source}): {e}") from e

        return settings


def _load_env_file(env_file: Optional[PathLike]) -> None:
    if env_file:
        load_dotenv(env_file)
        return
    for name in DOTENV_FILES:
        if Path(name).is_file():
            load_dotenv(name)
            return


def load_config(
    config_path: Optional[PathLike] = None,
    env_file: Optional[PathLike] = None,
    **overrides: Any,
) -> Settings:
    """
    Load settings from every source.

    Args:
        config_path: YAML config file to use instead of searching
        env_file: ``.env`` file to read before building settings
        **overrides: Section values that win over everything else

    Example:
        >>> settings = load_config(replay={"settle_delay_ms": 500})
    """
    return ConfigLoader(config_path).load(env_file=env_file, overrides=overrides or None)
