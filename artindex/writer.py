"""Persists the serialised article index."""

from __future__ import annotations

from pathlib import Path

from .logging import get_logger

_ESCAPED_SEPARATOR = "\\\\"


def normalise_separators(result: str) -> str:
    """Replace every doubled backslash with a forward slash."""
    return result.replace(_ESCAPED_SEPARATOR, "/")


class OutputWriter:
    """Writes the index result to a fixed path, overwriting previous runs."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.logger = get_logger("writer")

    def write(self, result: str) -> bool:
        """Write ``result`` to disk; failures are logged and reported as ``False``."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(normalise_separators(result), encoding="utf-8")
        except OSError as exc:
            self.logger.error("Error writing %s: %s", self.path, exc)
            return False
        self.logger.info("Article index written to %s", self.path)
        return True


__all__ = ["OutputWriter", "normalise_separators"]
