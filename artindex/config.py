"""Configuration loading for artindex (.artindex.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".artindex.yml"

DEFAULT_ARTICLES_DIR = "public/articles"
DEFAULT_PUBLIC_DIR = "public"
DEFAULT_OUTPUT = "public/articleIndex.json"
DEFAULT_MIN_TERM_LENGTH = 2


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or is inconsistent."""


@dataclass
class IndexSettings:
    """Tokenisation settings for the default index builder."""

    min_term_length: int = DEFAULT_MIN_TERM_LENGTH
    stop_words: List[str] = field(default_factory=list)


@dataclass
class IndexConfig:
    """Represents the settings defined in .artindex.yml."""

    root: Path
    articles_dir: Path
    public_dir: Path
    output_path: Path
    index: IndexSettings = field(default_factory=IndexSettings)

    def with_overrides(
        self,
        *,
        articles_dir: Optional[str] = None,
        public_dir: Optional[str] = None,
        output: Optional[str] = None,
    ) -> "IndexConfig":
        """Return a copy with command-line overrides applied and re-validated."""
        updated = replace(
            self,
            articles_dir=_resolve(self.root, articles_dir) if articles_dir else self.articles_dir,
            public_dir=_resolve(self.root, public_dir) if public_dir else self.public_dir,
            output_path=_resolve(self.root, output) if output else self.output_path,
        )
        _validate(updated)
        return updated


def default_config(root: Path) -> IndexConfig:
    """Return the built-in layout rooted at ``root``."""
    root = root.resolve()
    return IndexConfig(
        root=root,
        articles_dir=_resolve(root, DEFAULT_ARTICLES_DIR),
        public_dir=_resolve(root, DEFAULT_PUBLIC_DIR),
        output_path=_resolve(root, DEFAULT_OUTPUT),
    )


def load_config(config_path: Path) -> IndexConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return default_config(root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    index_data = _as_dict(data.get("index"))
    settings = IndexSettings()
    if index_data:
        min_length = _as_int(index_data.get("min_term_length"))
        if min_length is not None:
            if min_length < 1:
                raise ConfigError("index.min_term_length must be at least 1")
            settings.min_term_length = min_length
        settings.stop_words = [word.lower() for word in _as_str_list(index_data.get("stop_words"))]

    config = IndexConfig(
        root=root,
        articles_dir=_resolve(root, _as_str(data.get("articles_dir")) or DEFAULT_ARTICLES_DIR),
        public_dir=_resolve(root, _as_str(data.get("public_dir")) or DEFAULT_PUBLIC_DIR),
        output_path=_resolve(root, _as_str(data.get("output")) or DEFAULT_OUTPUT),
        index=settings,
    )
    _validate(config)
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _resolve(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def _validate(config: IndexConfig) -> None:
    if not config.articles_dir.is_relative_to(config.public_dir):
        raise ConfigError(
            f"articles_dir {config.articles_dir} is not inside public_dir {config.public_dir}"
        )


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
