"""Tests for artindex.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from artindex.logging import configure_logging, get_logger, reset_logging


def test_get_logger_nests_under_artindex() -> None:
    assert get_logger().name == "artindex"
    assert get_logger("walker").name == "artindex.walker"


def test_configure_logging_replaces_previous_handlers(tmp_path: Path) -> None:
    configure_logging(log_file=tmp_path / "first.log")
    logger = configure_logging(verbose=True)

    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert len(logger.handlers) == 1


def test_reset_logging_restores_propagation(tmp_path: Path) -> None:
    configure_logging(log_file=tmp_path / "nested" / "run.log")
    assert (tmp_path / "nested" / "run.log").exists()

    logger = reset_logging()

    assert logger.handlers == []
    assert logger.propagate is True
