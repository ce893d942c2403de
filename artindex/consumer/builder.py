"""Default consumer that builds a searchable article index."""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import yaml

from ..logging import get_logger
from ..models import FileEntry
from .base import IndexConsumer

INDEX_VERSION = 1

_WORD_PATTERN = re.compile(r"\w+")
_HEADING_PATTERN = re.compile(r"^#[ \t]+(.+?)[ \t#]*$", re.MULTILINE)
_FRONT_MATTER_FENCE = "---"


class FrontMatterError(ValueError):
    """Raised when an article's front matter block cannot be parsed."""


@dataclass
class ArticleRecord:
    """Index entry for a single article."""

    path: str
    title: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    words: int = 0


class ArticleIndexBuilder(IndexConsumer):
    """Collects articles and serialises a term index once input ends."""

    def __init__(self, *, min_term_length: int = 2, stop_words: Iterable[str] = ()) -> None:
        super().__init__()
        self.min_term_length = max(1, min_term_length)
        self.stop_words = {word.lower() for word in stop_words}
        self.logger = get_logger("consumer")
        self._articles: Dict[str, ArticleRecord] = {}
        self._terms: Dict[str, Set[str]] = {}
        self._finished = False

    def receive_input(self, entry: FileEntry) -> None:
        if self._finished:
            self.logger.debug("Ignoring %s received after the index was finalised", entry.relative_path)
            return
        if entry.relative_path in self._articles:
            self._fail(f"Duplicate article path: {entry.relative_path}")
            return

        try:
            metadata, body = split_front_matter(entry.content)
        except FrontMatterError as exc:
            self._fail(f"Invalid front matter in {entry.relative_path}: {exc}")
            return

        tokens = self._tokenize(body)
        record = ArticleRecord(
            path=entry.relative_path,
            title=_resolve_title(entry.relative_path, metadata, body),
            metadata=metadata,
            words=len(tokens),
        )
        self._articles[record.path] = record
        for term in self._terms_for(tokens):
            self._terms.setdefault(term, set()).add(record.path)
        self.logger.debug("Indexed %s (%d words)", record.path, record.words)

    def receive_end_of_input(self) -> None:
        if self._finished:
            self.logger.debug("Ignoring repeated end of input")
            return
        try:
            result = self.serialise()
        except (TypeError, ValueError) as exc:
            self._fail(f"Could not serialise article index: {exc}")
            return
        self._finished = True
        self.results.send(result)

    def serialise(self) -> str:
        """Return the JSON index for everything received so far."""
        articles = [
            {
                "path": record.path,
                "title": record.title,
                "metadata": record.metadata,
                "words": record.words,
            }
            for record in sorted(self._articles.values(), key=lambda record: record.path)
        ]
        terms = {term: sorted(paths) for term, paths in self._terms.items()}
        payload = {"version": INDEX_VERSION, "articles": articles, "terms": terms}
        return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, default=str)

    # ------------------------------------------------------------------
    # Internal helpers

    def _fail(self, message: str) -> None:
        self._finished = True
        self.errors.send(message)

    def _tokenize(self, text: str) -> List[str]:
        return [token.lower() for token in _WORD_PATTERN.findall(text)]

    def _terms_for(self, tokens: List[str]) -> List[str]:
        terms = [
            token
            for token in tokens
            if len(token) >= self.min_term_length and token not in self.stop_words
        ]
        return list(dict.fromkeys(terms))


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a leading ``---`` fenced YAML block from the article body."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n").strip() != _FRONT_MATTER_FENCE:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n").strip() == _FRONT_MATTER_FENCE:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            break
    else:
        raise FrontMatterError("missing closing '---'")

    try:
        loaded = yaml.safe_load(block) if block.strip() else {}
    except yaml.YAMLError as exc:
        raise FrontMatterError(str(exc)) from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise FrontMatterError("front matter must be a mapping")
    try:
        metadata = _json_safe(loaded)
    except RecursionError as exc:
        raise FrontMatterError("front matter refers to itself through an alias") from exc
    return metadata, body


def _json_safe(value: Any) -> Any:
    """Convert YAML values into something ``json.dumps`` accepts with string keys."""
    if isinstance(value, dict):
        converted: Dict[str, Any] = {}
        for key, item in value.items():
            name = _json_key(key)
            if name in converted:
                raise FrontMatterError(f"key {name!r} appears more than once after conversion to text")
            converted[name] = _json_safe(item)
        return converted
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_json_safe(item) for item in value]
        return sorted(items, key=repr) if isinstance(value, (set, frozenset)) else items
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool) or key is None:
        return json.dumps(key)
    if isinstance(key, (date, datetime)):
        return key.isoformat()
    return str(key)


def _resolve_title(path: str, metadata: Dict[str, Any], body: str) -> str:
    title: Optional[Any] = metadata.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()
    match = _HEADING_PATTERN.search(body)
    if match:
        return match.group(1).strip()
    return PurePosixPath(path).stem


__all__ = ["ArticleIndexBuilder", "ArticleRecord", "FrontMatterError", "split_front_matter"]
