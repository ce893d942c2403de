"""Core data models shared across artindex components."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class FileEntry:
    """One article file handed to the index consumer."""

    relative_path: str
    content: str


@dataclass
class BuildOutcome:
    """Result of a single index build run."""

    output_path: Path
    files: int
    written: bool
    dry_run: bool = False
    result: Optional[str] = None
