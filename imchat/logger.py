"""Process-wide default logger: console in debug mode, file in release mode."""

from __future__ import annotations

import logging
import sys

__all__ = ["TRACE", "LOGGER_NAME", "init_logger", "get_logger"]

LOGGER_NAME = "default-logger"
TRACE = 5
_OFF = logging.CRITICAL + 10

logging.addLevelName(TRACE, "TRACE")

# Numeric levels 0..6: trace, debug, info, warn, error, critical, off.
_LEVELS = (TRACE, logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL, _OFF)

_LEVEL_NAMES = {
    TRACE: "trace",
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "critical",
}

_PATTERN = "[%(name)s][%(asctime)s][%(thread)d][%(short_level)-8s] [%(filename)s:%(lineno)d]%(message)s"
_DATE_FORMAT = "%H:%M:%S"

_logger: logging.Logger | None = None


class _Formatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.short_level = _LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        return super().format(record)


class _StdoutHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stdout`` is at the time of each record."""

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stdout
        super().emit(record)


def init_logger(release_mode: bool, file: str, level: int) -> logging.Logger:
    """Configure the default logger.

    In debug mode (*release_mode* false) everything goes to stdout. In release
    mode records at or above *level* (0 = trace ... 6 = off) go to *file*.
    """
    global _logger
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if release_mode:
        if not 0 <= level < len(_LEVELS):
            raise ValueError(f"log level must be between 0 and {len(_LEVELS) - 1}, got {level}")
        threshold = _LEVELS[level]
        handler: logging.Handler = logging.FileHandler(file, encoding="utf-8")
    else:
        threshold = TRACE
        handler = _StdoutHandler(sys.stdout)

    handler.setFormatter(_Formatter(_PATTERN, _DATE_FORMAT))
    handler.setLevel(threshold)
    logger.addHandler(handler)
    logger.setLevel(threshold)
    logger.propagate = False
    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the default logger; raises RuntimeError before init_logger."""
    if _logger is None:
        raise RuntimeError("logger not initialised; call init_logger first")
    return _logger