"""
Logging setup for the buildgate CLI.

Two streams leave the process: progress lines for the user (click, on
stdout) and log records (this module, on stderr). Only the
``buildgate`` logger tree gets handlers; the root logger is left alone.

Level precedence:
    --debug  >  --verbose  >  --quiet  >  BUILDGATE_LOG_LEVEL  >  WARNING

Optional file output via BUILDGATE_LOG_FILE / BUILDGATE_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

LOG_LEVEL_ENV = "BUILDGATE_LOG_LEVEL"
LOG_FILE_ENV = "BUILDGATE_LOG_FILE"
LOG_FILE_LEVEL_ENV = "BUILDGATE_LOG_FILE_LEVEL"

PACKAGE_LOGGER = "buildgate"

# ── Formats ─────────────────────────────────────────────────────

# Default: records land between progress lines, so tag them
_FMT_CONSOLE = "buildgate: %(levelname)s: %(message)s"

# --verbose: which engine part is talking
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# --debug and log files: full detail
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"

_DATEFMT_CONSOLE = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


class _CurrentStderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is at emit time.

    click swaps the standard streams (e.g. under ``CliRunner``); binding
    the stream once at setup would keep writing to a stale one.
    """

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric


def cli_log_level(
    verbose: bool = False,
    quiet: bool = False,
    debug: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from the global CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    environ = os.environ if environ is None else environ
    return environ.get(LOG_LEVEL_ENV) or "WARNING"


def _console_formatter(level: int) -> logging.Formatter:
    if level <= logging.DEBUG:
        return logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_CONSOLE)
    if level <= logging.INFO:
        return logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_CONSOLE)
    return logging.Formatter(_FMT_CONSOLE)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Configure the ``buildgate`` logger tree. Safe to call repeatedly.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file. Defaults to ``level``.

    Returns:
        The configured package logger.
    """
    console_level = parse_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console = _CurrentStderrHandler()
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    package_logger.addHandler(console)

    effective_level = console_level
    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_FILE))
        package_logger.addHandler(fh)

    package_logger.setLevel(effective_level)
    return package_logger
