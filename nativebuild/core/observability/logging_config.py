"""
Logging configuration for the nativebuild CLI.

``setup_logging`` runs once from main.py; modules log through
``logging.getLogger(__name__)``.

Level precedence:
    --debug / --verbose / --quiet  >  NATIVEBUILD_LOG_LEVEL  >  WARNING

NATIVEBUILD_LOG_FILE adds a file handler, at NATIVEBUILD_LOG_FILE_LEVEL
when set (so a quiet terminal can still keep a debug log on disk).

Compiler output and log records share the terminal.  The process
runner writes each prefixed line while holding ``OUTPUT_LOCK``, and the
console handler takes the same lock, so a log record never lands in the
middle of a compiler line.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import TextIO

# Held for every whole-line write to the terminal
OUTPUT_LOCK = threading.Lock()

# Console formats by level; pool threads are named after the operation
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s [%(threadName)s] %(name)s: %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s %(message)s", "%H:%M:%S"),
}
_CONSOLE_DEFAULT = ("%(message)s", None)

_FMT_FILE = "%(asctime)s %(levelname)-5s [%(threadName)s] %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


class TerminalHandler(logging.StreamHandler):
    """StreamHandler that writes under the shared terminal lock."""

    def emit(self, record: logging.LogRecord) -> None:
        with OUTPUT_LOCK:
            super().emit(record)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Replace the root logger's handlers with a terminal and optional file handler.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path of a log file.
        log_file_level: Level for the file; defaults to ``level``.
        stream: Console stream; defaults to stderr.
    """
    console_level = _parse_level(level)
    if console_level <= logging.DEBUG:
        fmt, datefmt = _CONSOLE_FORMATS[logging.DEBUG]
    elif console_level <= logging.INFO:
        fmt, datefmt = _CONSOLE_FORMATS[logging.INFO]
    else:
        fmt, datefmt = _CONSOLE_DEFAULT

    console = TerminalHandler(stream or sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)


def _parse_level(level: str | None) -> int:
    """Level name to number; unknown or empty names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
