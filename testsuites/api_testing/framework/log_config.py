"""
================================================================================
Logging Configuration
================================================================================

Centralized Loguru setup for the harness, the test runner and conftest hooks.

Features:
    - Single initialization per process
    - Level and format from arguments, LOG_LEVEL / LOG_FILE env vars or the
      "logging" section of the YAML configuration
    - Optional rotating file sink

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader


DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

_logger_initialized: bool = False


def init_logger(
    level: Optional[str] = None,
    format_str: Optional[str] = None,
    log_file: Optional[str] = None,
    config: Optional[ConfigLoader] = None,
) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    Subsequent calls are no-ops until reset_logger() is called.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_str: Custom log format string. Defaults to config value.
        log_file: Optional file path for an additional rotating sink.
        config: Loader providing the "logging" section.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    def _setting(key: str, default):
        return config.get(key, default) if config is not None else default

    log_level = str(level or _setting("logging.level", "INFO")).upper()
    log_format = format_str or _setting("logging.format", DEFAULT_LOG_FORMAT)
    log_file = log_file or _setting("logging.file", None)

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=log_level,
            format=log_format.replace("{level: <8}", "{level}"),
            rotation=_setting("logging.rotation", "10 MB"),
            retention=_setting("logging.retention", "7 days"),
            compression="zip",
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


def reset_logger() -> None:
    """Allow init_logger() to reconfigure sinks (used by tests)."""
    global _logger_initialized
    _logger_initialized = False


__all__ = [
    "init_logger",
    "reset_logger",
    "DEFAULT_LOG_FORMAT",
]
