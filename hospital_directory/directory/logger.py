"""Loguru setup shared by the whole directory package.

Importing this module installs a console sink and a rotating file sink;
other modules only do `from directory.logger import logger`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE_NAME = "hospital_directory.log"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def configure(level: Optional[str] = None, log_dir: Optional[Union[str, Path]] = None) -> Path:
    """Replace every sink with the console and file sinks; returns the log file path."""
    level = (level or LOG_LEVEL).upper()
    log_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    logger.remove()
    logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT)
    logger.add(
        log_file,
        level=level,
        format=FILE_FORMAT,
        rotation="10 MB",
        retention="10 days",
        encoding="utf-8",
        enqueue=True,
    )
    return log_file


configure()

__all__ = ["logger", "configure"]
