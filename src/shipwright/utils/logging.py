"""Logging helpers.

Every run writes to the console (colour-coded through rich) and appends to a
single log file named after the run's start time. Output captured from local
and remote commands goes to the ``shipwright.transcript`` logger, which only
reaches the log file.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

PACKAGE_LOGGER = "shipwright"
TRANSCRIPT_LOGGER = f"{PACKAGE_LOGGER}.transcript"

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_THEME = Theme(
    {
        "logging.level.info": "blue",
        "logging.level.success": "bold green",
        "logging.level.warning": "yellow",
        "logging.level.error": "bold red",
    }
)

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_INSTALLED_HANDLERS: List[logging.Handler] = []


class _ConsoleFilter(logging.Filter):
    """Keep command transcripts out of the interactive console."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(TRANSCRIPT_LOGGER)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if name is None or name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name or PACKAGE_LOGGER)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def log_success(logger: logging.Logger, message: str, *args: object) -> None:
    logger.log(SUCCESS, message, *args)


def log_filename(started: datetime, prefix: str = "deploy") -> str:
    return f"{prefix}_{started:%Y%m%d_%H%M%S}.log"


def configure_run_logging(
    log_dir: Path,
    *,
    started: Optional[datetime] = None,
    prefix: str = "deploy",
    console: Optional[Console] = None,
) -> Path:
    """Attach console and file handlers for one run and return the log path."""
    reset_logging()

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_filename(started or datetime.now(), prefix)

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))

    console_handler = RichHandler(
        console=console or Console(theme=LOG_THEME),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    console_handler.addFilter(_ConsoleFilter())

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.INFO)
    for handler in (file_handler, console_handler):
        logger.addHandler(handler)
        _INSTALLED_HANDLERS.append(handler)
    return log_file


def reset_logging() -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)
    while _INSTALLED_HANDLERS:
        handler = _INSTALLED_HANDLERS.pop()
        logger.removeHandler(handler)
        handler.close()
