"""Tests for artindex.writer."""

from __future__ import annotations

import logging
from pathlib import Path

from artindex.writer import OutputWriter, normalise_separators


def test_normalise_separators_replaces_doubled_backslashes() -> None:
    raw = '{"path": "articles\\\\2024\\\\post.md"}'
    assert normalise_separators(raw) == '{"path": "articles/2024/post.md"}'


def test_normalise_separators_leaves_single_backslashes() -> None:
    assert normalise_separators('line\\nbreak') == 'line\\nbreak'


def test_write_creates_parents_and_overwrites(tmp_path: Path) -> None:
    target = tmp_path / "public" / "articleIndex.json"
    writer = OutputWriter(target)

    assert writer.write("first") is True
    assert writer.write('{"p": "a\\\\b"}') is True

    assert target.read_text(encoding="utf-8") == '{"p": "a/b"}'


def test_write_failure_is_logged_not_raised(tmp_path: Path, caplog) -> None:
    target = tmp_path / "occupied"
    target.mkdir()
    writer = OutputWriter(target)

    with caplog.at_level(logging.ERROR, logger="artindex"):
        assert writer.write("{}") is False

    assert any("Error writing" in record.getMessage() for record in caplog.records)
