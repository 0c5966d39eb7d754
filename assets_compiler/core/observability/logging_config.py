"""
Logging configuration — one call at CLI startup.

Every module logs through ``logging.getLogger(__name__)``; this module
only decides where those records go and how loud the run is.

    WARNING  status problems and per-package error summaries (default)
    INFO     verbose: command output, lock/wipe/pre-compilation notes,
             stack traces of per-package failures
    DEBUG    everything, prefixed with time and file:line

Level precedence:
    --debug / -v / -q  >  ASSETS_COMPILER_LOG_LEVEL  >  WARNING

A log file can be added with ASSETS_COMPILER_LOG_FILE and its own
level with ASSETS_COMPILER_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys

LEVEL_ENV = "ASSETS_COMPILER_LOG_LEVEL"
FILE_ENV = "ASSETS_COMPILER_LOG_FILE"
FILE_LEVEL_ENV = "ASSETS_COMPILER_LOG_FILE_LEVEL"

_FMT_PLAIN = "%(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Map CLI verbosity flags to a level name."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LEVEL_ENV, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name.
        log_file: Optional path of a log file (always full detail).
        log_file_level: Level of the log file. Defaults to ``level``.
    """
    console_level = _parse_level(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_console_handler(console_level))
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root.addHandler(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if level <= logging.DEBUG:
        handler.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt="%H:%M:%S"))
    else:
        # command output is relayed line by line, keep it unprefixed
        handler.setFormatter(logging.Formatter(_FMT_PLAIN))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
