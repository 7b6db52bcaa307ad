"""
Logging setup for the recorder-studio CLI.

Console output goes through Rich on stderr so generated code printed to
stdout stays clean for piping.
"""

import json
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log every frame or request at DEBUG
NOISY_LOGGERS = ("websockets", "httpx", "httpcore", "asyncio")
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    fmt: str = DEFAULT_FORMAT,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Also append records to this file
        json_format: Write the file as JSON lines instead of plain text
        fmt: Format string for the plain-text file
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    root_logger.addHandler(RichHandler(
        console=Console(stderr=True),
        level=log_level,
        show_time=log_level <= logging.DEBUG,
        show_path=False,
        rich_tracebacks=True,
    ))

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            JsonLineFormatter() if json_format
            else logging.Formatter(fmt)
        )
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
