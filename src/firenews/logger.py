"""
Logging setup for firenews.

Modules log through ``get_logger(__name__)``; ``setup_logger`` installs the
sinks once per process, from the CLI or the embedding application.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from firenews.config import LoggingConfig, get_config


def setup_logger(
    config: Optional[LoggingConfig] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    rotation: Optional[str] = None,
    retention: Optional[str] = None,
) -> None:
    """Replace loguru's default sink with the configured console and file sinks.

    Args:
        config: Logging configuration; the global one when omitted
        level: Level overriding the configured one
        log_file: Log file path; passing one turns the file sink on
        rotation: Rotation overriding the configured one (e.g. "100 MB")
        retention: Retention overriding the configured one (e.g. "30 days")
    """
    config = config or get_config().logging
    level = (level or config.level).upper()
    sink_options = {"format": config.format, "level": level, "backtrace": True, "diagnose": False}

    _logger.remove()

    if config.console_enabled:
        _logger.add(sys.stderr, colorize=True, **sink_options)

    if config.file_enabled or log_file is not None:
        path = Path(log_file or config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            path,
            rotation=rotation or config.rotation,
            retention=retention or config.retention,
            compression="zip",
            encoding="utf-8",
            enqueue=True,  # fetch workers log from several threads
            **sink_options,
        )


def get_logger(name: str):
    """Logger bound to a module name (``extra["name"]``)."""
    return _logger.bind(name=name)
