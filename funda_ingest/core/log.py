"""
Logging helpers.

Library modules only call `get_logger(__name__)`; handlers are installed once
by `configure_logging()` (the CLI calls it). Environment switches:
  - FUNDA_INGEST_DEBUG=1|true|yes|on → DEBUG level
  - FUNDA_INGEST_LOG_FILE=<path>     → also log to a rotating file
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = "funda_ingest"

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DATEFMT = "(%Y-%m-%d %H:%M:%S)"
_HANDLER_TAG = "_funda_ingest_handler"


def debug_enabled() -> bool:
    return os.getenv("FUNDA_INGEST_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def get_logger(name: str | None = None) -> logging.Logger:
    """Child logger under the package root (module names map 1:1)."""
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: int | str | None = None, log_file: str | Path | None = None) -> logging.Logger:
    """
    Install stderr (and optional rotating file) handlers on the package logger.
    Safe to call repeatedly; previously installed handlers are replaced.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    if level is None:
        level = logging.DEBUG if debug_enabled() else logging.INFO
    logger.setLevel(level)

    for h in list(logger.handlers):
        if getattr(h, _HANDLER_TAG, False):
            logger.removeHandler(h)
            h.close()

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    setattr(stream, _HANDLER_TAG, True)
    logger.addHandler(stream)

    path = log_file or os.getenv("FUNDA_INGEST_LOG_FILE")
    if path:
        p = Path(path)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(p, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        except OSError as e:
            logger.warning("could not open log file %s: %s", p, e)
        else:
            fh.setFormatter(formatter)
            setattr(fh, _HANDLER_TAG, True)
            logger.addHandler(fh)

    return logger


__all__ = ["ROOT_LOGGER_NAME", "configure_logging", "debug_enabled", "get_logger"]
