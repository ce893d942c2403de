"""Tests for artindex.orchestrator."""

from __future__ import annotations

import errno
import json
from pathlib import Path
from typing import List

import pytest

from artindex import walker as walker_module
from artindex.config import IndexConfig
from artindex.consumer import ConsumerError, IndexConsumer
from artindex.models import FileEntry
from artindex.orchestrator import IndexOrchestrator
from artindex.walker import FileReadError
from artindex.writer import OutputWriter


class _WindowsPathConsumer(IndexConsumer):
    """Serialises paths with backslashes like an index built on Windows."""

    def __init__(self) -> None:
        super().__init__()
        self.paths: List[str] = []

    def receive_input(self, entry: FileEntry) -> None:
        self.paths.append(entry.relative_path.replace("/", "\\"))

    def receive_end_of_input(self) -> None:
        self.results.send(json.dumps({"paths": sorted(self.paths)}))


class _FailingConsumer(IndexConsumer):
    def receive_input(self, entry: FileEntry) -> None:
        self.errors.send(f"cannot index {entry.relative_path}")

    def receive_end_of_input(self) -> None:  # pragma: no cover - never reached
        self.results.send("{}")


class _SilentConsumer(IndexConsumer):
    def receive_input(self, entry: FileEntry) -> None:
        pass

    def receive_end_of_input(self) -> None:
        pass


def test_run_writes_index_for_article_tree(article_tree) -> None:
    article_tree.write(
        {
            "a.txt": "hello",
            "sub/b.txt": "world",
        }
    )

    outcome = IndexOrchestrator().run(article_tree.config())

    assert outcome.files == 2
    assert outcome.written is True
    assert outcome.output_path == article_tree.output.resolve()
    index = json.loads(article_tree.output.read_text(encoding="utf-8"))
    assert [article["path"] for article in index["articles"]] == [
        "articles/a.txt",
        "articles/sub/b.txt",
    ]
    assert index["terms"]["hello"] == ["articles/a.txt"]
    assert index["terms"]["world"] == ["articles/sub/b.txt"]


def test_run_normalises_escaped_separators(article_tree) -> None:
    article_tree.write({"2024/post.md": "text"})

    IndexOrchestrator(consumer_factory=lambda config: _WindowsPathConsumer()).run(
        article_tree.config()
    )

    written = article_tree.output.read_text(encoding="utf-8")
    assert "\\" not in written
    assert json.loads(written) == {"paths": ["articles/2024/post.md"]}


def test_run_empty_tree_writes_empty_index(article_tree) -> None:
    outcome = IndexOrchestrator().run(article_tree.config())

    assert outcome.files == 0
    index = json.loads(article_tree.output.read_text(encoding="utf-8"))
    assert index["articles"] == []
    assert index["terms"] == {}


def test_read_failure_leaves_no_output(article_tree, monkeypatch) -> None:
    article_tree.write({"ok.md": "fine", "bad.md": "unreadable"})

    def _failing_read(path: Path) -> str:
        raise PermissionError(errno.EACCES, "Permission denied", str(path))

    monkeypatch.setattr(walker_module, "_read_text", _failing_read)

    with pytest.raises(FileReadError):
        IndexOrchestrator().run(article_tree.config())
    assert not article_tree.output.exists()


def test_consumer_error_is_fatal(article_tree) -> None:
    article_tree.write({"post.md": "body"})

    orchestrator = IndexOrchestrator(consumer_factory=lambda config: _FailingConsumer())
    with pytest.raises(ConsumerError, match="cannot index articles/post.md"):
        orchestrator.run(article_tree.config())
    assert not article_tree.output.exists()


def test_invalid_front_matter_is_fatal(article_tree) -> None:
    article_tree.write({"post.md": "---\ntitle: [oops\n---\nbody\n"})

    with pytest.raises(ConsumerError, match="Invalid front matter"):
        IndexOrchestrator().run(article_tree.config())
    assert not article_tree.output.exists()


def test_consumer_without_result_is_an_error(article_tree) -> None:
    article_tree.write({"post.md": "body"})

    orchestrator = IndexOrchestrator(consumer_factory=lambda config: _SilentConsumer())
    with pytest.raises(ConsumerError, match="without producing a result"):
        orchestrator.run(article_tree.config())


def test_write_failure_is_not_fatal(article_tree) -> None:
    article_tree.write({"post.md": "body"})
    article_tree.output.mkdir()

    outcome = IndexOrchestrator().run(article_tree.config())

    assert outcome.files == 1
    assert outcome.written is False


def test_dry_run_returns_result_without_writing(article_tree) -> None:
    article_tree.write({"post.md": "# Hello\nbody\n"})

    outcome = IndexOrchestrator().run(article_tree.config(), dry_run=True)

    assert outcome.dry_run is True
    assert outcome.written is False
    assert not article_tree.output.exists()
    assert outcome.result is not None
    assert json.loads(outcome.result)["articles"][0]["title"] == "Hello"


def test_run_uses_configured_stop_words(article_tree) -> None:
    article_tree.write({"post.md": "the quick fox"})
    config = article_tree.config()
    config.index.stop_words = ["the"]

    IndexOrchestrator().run(config)

    terms = json.loads(article_tree.output.read_text(encoding="utf-8"))["terms"]
    assert "the" not in terms
    assert terms["fox"] == ["articles/post.md"]


def test_run_rejects_missing_articles_dir(tmp_path: Path) -> None:
    config = IndexConfig(
        root=tmp_path,
        articles_dir=tmp_path / "public" / "articles",
        public_dir=tmp_path / "public",
        output_path=tmp_path / "public" / "articleIndex.json",
    )

    with pytest.raises(FileNotFoundError):
        IndexOrchestrator().run(config)


def test_run_uses_writer_factory(article_tree) -> None:
    article_tree.write({"post.md": "body"})
    targets: List[Path] = []

    def _factory(path: Path) -> OutputWriter:
        targets.append(path)
        return OutputWriter(path)

    IndexOrchestrator(writer_factory=_factory).run(article_tree.config())

    assert targets == [article_tree.config().output_path]
