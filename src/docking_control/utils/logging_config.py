"""
Logging Setup

One place to attach handlers to the ``docking_control`` logger tree.
Modules only ever call ``logging.getLogger(__name__)``; nothing is
configured at import time.

Formats:
- readable: ``time [LEVEL] logger: message`` (console and file)
- simple: ``time, message`` (quick CSV-like traces)
- structured: one JSON object per line (file only; console stays readable)

Usage:
    from docking_control.utils.logging_config import setup_logging

    logger = setup_logging("docking_control", level=logging.DEBUG, log_file="run.log")
    logger.info("Docked", extra={"elapsed": 42.1, "fuel": 4.2})
"""

import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

READABLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
SIMPLE_FORMAT = "%(asctime)s, %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    JSON-lines formatter.

    Fields passed with ``extra=`` are merged into the top-level object, so
    ``logger.info("Docked", extra={"elapsed": 42.1})`` yields
    ``{"timestamp": ..., "level": "INFO", ..., "elapsed": 42.1}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _file_formatter(simple_format: bool, structured: bool) -> logging.Formatter:
    if structured:
        return StructuredFormatter()
    if simple_format:
        return logging.Formatter(SIMPLE_FORMAT, datefmt=DATE_FORMAT)
    return logging.Formatter(READABLE_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    name: str = "docking_control",
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    simple_format: bool = False,
    structured: bool = False,
) -> logging.Logger:
    """
    Attach console and/or file handlers to ``name``.

    Calling it again replaces the previous handlers instead of stacking
    new ones.

    Args:
        name: Logger to configure; the package name covers every module
        level: Level for the logger and its handlers
        log_file: Optional log file (parent directories are created)
        console: Log readable lines to stderr
        simple_format: Use the ``time, message`` format
        structured: Write JSON lines to the file

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = []
    if console:
        stream = logging.StreamHandler(sys.stderr)
        console_format = SIMPLE_FORMAT if simple_format and not structured else READABLE_FORMAT
        stream.setFormatter(logging.Formatter(console_format, datefmt=DATE_FORMAT))
        handlers.append(stream)
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(_file_formatter(simple_format, structured))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


@contextmanager
def temporary_log_level(logger_name: str, level: int) -> Iterator[logging.Logger]:
    """
    Raise or lower one logger's level for the duration of a block.

    Usage:
        with temporary_log_level("docking_control.core.desaturation", logging.DEBUG):
            session.desaturate()
    """
    logger = logging.getLogger(logger_name)
    previous = logger.level
    logger.setLevel(level)
    try:
        yield logger
    finally:
        logger.setLevel(previous)


def configure_module_log_levels(module_levels: Dict[str, int]) -> None:
    """
    Set levels per module, e.g. quiet the per-step session chatter:

        configure_module_log_levels({"docking_control.core.session": logging.WARNING})
    """
    for module, level in module_levels.items():
        logging.getLogger(module).setLevel(level)
