"""Loguru sink configuration."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(level: str = "INFO", log_file: Path | None = None, *, stderr: bool = False) -> None:
    """Replace the default sink.

    The Textual UI owns the terminal, so stderr is only attached on
    request (CLI commands that do not draw).
    """
    logger.remove()
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level.upper(),
            format=LOG_FORMAT,
            rotation="1 MB",
            retention=3,
            encoding="utf-8",
        )
    if stderr:
        logger.add(sys.stderr, level=level.upper())
