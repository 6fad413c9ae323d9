"""
Logging Setup
=============
Console output is coloured by level; the optional file log is plain text,
one file per day under LOG_DIR.

httpx is held at WARNING or above: its INFO line for every request prints
the full URL, and the Gemini URL carries the API key as a query parameter.
"""
import logging
import os
import sys
from datetime import date
from typing import Optional

from code_analyzer.core.config import LOG_DIR, LOG_TO_FILE

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RESET = "\x1b[0m"
LEVEL_COLOURS = {
    logging.DEBUG: "\x1b[36m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[31;1m",
}

_OWNED_LOGGERS = ("code_analyzer", "main")


class LevelColourFormatter(logging.Formatter):
    """Wraps each formatted record in the ANSI colour of its level."""

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT) -> None:
        super().__init__(fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        colour = LEVEL_COLOURS.get(record.levelno)
        return f"{colour}{text}{_RESET}" if colour else text


def log_file_path(log_dir: str, day: Optional[date] = None) -> str:
    day = day or date.today()
    return os.path.join(log_dir, f"analyzer_{day:%Y%m%d}.log")


def build_console_handler(stream=None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(LevelColourFormatter())
    return handler


def build_file_handler(log_dir: str) -> logging.FileHandler:
    """Plain-text handler appending to today's log file; creates log_dir."""
    os.makedirs(log_dir, exist_ok=True)
    handler = logging.FileHandler(log_file_path(log_dir), encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level=logging.INFO, log_dir=LOG_DIR, to_file=LOG_TO_FILE, root=None):
    """
    Install the analyzer's handlers on ``root`` (the root logger by default).

    Existing handlers are replaced, so calling this twice does not
    duplicate output.
    """
    root = root or logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(level)
    root.addHandler(build_console_handler())
    if to_file:
        root.addHandler(build_file_handler(log_dir))

    for name in _OWNED_LOGGERS:
        logging.getLogger(name).setLevel(level)
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    root.debug("Logging configured (level=%s, file=%s)", logging.getLevelName(level), to_file)
