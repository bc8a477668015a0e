"""Logging setup for LibScout.

All modules log through :data:`logger`; the CLI calls :func:`init_logging`
once to attach handlers.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "LibScout"

_LevelT = Union[int, str]


def _stderr_handler(fmt: str) -> logging.StreamHandler:
    # stdout is reserved for the JSON report
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach a stderr handler (and a rotating file handler if *log_file*) to the LibScout logger.

    With ``replace_handlers=False`` existing handlers are kept and the new
    ones appended. Propagation to the root logger is switched off.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        lg.handlers.clear()

    lg.addHandler(_stderr_handler(log_format))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Shortcut used by the CLI: replace handlers and apply *level*."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


logger: logging.Logger = logging.getLogger(LOGGER_NAME)

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
