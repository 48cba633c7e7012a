"""
Logging utilities for npm-orchestrator.

Every module logs through a child of the ``npm_orchestrator`` logger, so a
single call to :func:`setup_logging` controls the whole package.

Level names follow npm's ``--loglevel`` vocabulary: ``silly`` (every
command line and execution option), ``verbose`` (decisions such as
skipping an empty install), ``info``, ``warn`` and ``error``.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

SILLY = 5
VERBOSE = 15

logging.addLevelName(SILLY, "SILLY")
logging.addLevelName(VERBOSE, "VERBOSE")

LOG_LEVELS: dict[str, int] = {
    "silly": SILLY,
    "verbose": VERBOSE,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "silent": logging.CRITICAL + 1,
}

# Package root logger
_root_logger = logging.getLogger("npm_orchestrator")


def resolve_level(level: str | int) -> int:
    """Map an npm-style or stdlib level name to a numeric level."""
    if isinstance(level, int):
        return level
    name = level.lower()
    if name in LOG_LEVELS:
        return LOG_LEVELS[name]
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: str | int = "info",
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
) -> None:
    """
    Configure logging for npm-orchestrator.

    Args:
        level: ``silly``, ``verbose``, ``info``, ``warn``, ``error``,
            ``silent``, any stdlib level name, or an int
        format: Custom log format string
        stream: Output stream (defaults to stderr)
        file: Optional file path to write logs

    Example:
        from npm_orchestrator.logging import setup_logging

        # Show the exact npm/yarn command lines being run
        setup_logging("silly")

        # Keep a record of a bootstrap run
        setup_logging("verbose", file="bootstrap.log")
    """
    level = resolve_level(level)

    _root_logger.setLevel(level)
    _root_logger.handlers.clear()

    if format is None:
        format = "%(levelname)s %(name)s: %(message)s"

    formatter = logging.Formatter(format)

    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(level)
    _root_logger.addHandler(stream_handler)

    if file:
        file_handler = logging.FileHandler(file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        _root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a submodule.

    Args:
        name: Submodule name (e.g., "npm", "manifest.swap") or a full
            ``npm_orchestrator.*`` module name
    """
    if name.startswith("npm_orchestrator."):
        return logging.getLogger(name)
    return logging.getLogger(f"npm_orchestrator.{name}")
