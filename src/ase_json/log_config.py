"""Logging configuration for the converter.

Logs go to stderr by default so stdout stays free for the conversion summary.
"""

from __future__ import annotations

import logging
import os
import sys

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV = "ASE_JSON_LOG_LEVEL"


def default_log_level() -> str:
    return str(os.getenv(LOG_LEVEL_ENV, "") or "WARNING").strip().upper()


def configure_logging(
    level: str | None = None, format_string: str | None = None, filename: str | None = None
) -> None:
    """Configure application-wide logging.

    Can be called more than once; later calls replace the earlier setup.

    Args:
        level: Logging level name, case-insensitive. Falls back to
               ``ASE_JSON_LOG_LEVEL`` and then WARNING.
        format_string: Custom format for log records.
        filename: Log file path. If None, logs to stderr.
    """
    level_name = (level or default_log_level()).upper()
    handler: logging.Handler
    if filename:
        handler = logging.FileHandler(filename)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        handlers=[handler],
        force=True,
    )
