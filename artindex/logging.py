"""Logger setup shared by the walker, index builder and CLI."""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT = "artindex"
_CONSOLE_FORMAT = "[artindex] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Child logger such as ``artindex.walker``; the bare root when ``name`` is empty."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def reset_logging() -> logging.Logger:
    """Detach and close every handler on the artindex root and restore propagation."""
    logger = logging.getLogger(_ROOT)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    return logger


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send build progress to stderr and, when ``log_file`` is given, to that file too.

    Calling this again replaces the handlers from the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = reset_logging()
    logger.setLevel(level)
    logger.propagate = False

    _attach(logger, logging.StreamHandler(), level, _CONSOLE_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT)
    return logger


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
