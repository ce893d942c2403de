from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from artindex.logging import reset_logging
from tests._fixtures.article_builder import ArticleTreeBuilder


@pytest.fixture
def article_tree(tmp_path: Path) -> ArticleTreeBuilder:
    """Provide a reusable article tree rooted at the pytest tmp_path."""
    return ArticleTreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_artindex_logger() -> Iterator[None]:
    """Drop handlers installed by configure_logging so caplog keeps working."""
    yield
    reset_logging()
