"""Build a JSON search index from a directory of article files."""

from .config import ConfigError, IndexConfig, load_config
from .models import BuildOutcome, FileEntry
from .orchestrator import IndexOrchestrator

__all__ = [
    "BuildOutcome",
    "ConfigError",
    "FileEntry",
    "IndexConfig",
    "IndexOrchestrator",
    "load_config",
]
