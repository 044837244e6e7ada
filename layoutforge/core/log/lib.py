"""Core logging implementation for layoutforge."""

import logging
import sys
from typing import Optional

from layoutforge.config import EnvVar, get_environment

__all__ = ["get_logger", "setup_logging"]


def setup_logging(level: int | str | None = None, stream=sys.stderr) -> None:
    """Configure basic logging.

    Args:
        level: Logging level. Falls back to the LOG_LEVEL environment variable.
        stream: Output stream.
    """
    if level is None:
        level = get_environment(EnvVar.LOG_LEVEL)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name or "layoutforge")
