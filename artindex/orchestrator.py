"""Pipeline orchestration for article index builds."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import IndexConfig
from .consumer import ArticleIndexBuilder, ConsumerError, IndexConsumer
from .logging import get_logger
from .models import BuildOutcome
from .walker import ArticleWalker
from .writer import OutputWriter, normalise_separators

ConsumerFactory = Callable[[IndexConfig], IndexConsumer]
WriterFactory = Callable[[Path], OutputWriter]


def _default_consumer(config: IndexConfig) -> IndexConsumer:
    return ArticleIndexBuilder(
        min_term_length=config.index.min_term_length,
        stop_words=config.index.stop_words,
    )


@dataclass
class _RunState:
    result: Optional[str] = None
    written: bool = False


class IndexOrchestrator:
    """Coordinates a walk, the index consumer and the output writer for one build."""

    def __init__(
        self,
        consumer_factory: ConsumerFactory = _default_consumer,
        writer_factory: WriterFactory = OutputWriter,
    ) -> None:
        self.consumer_factory = consumer_factory
        self.writer_factory = writer_factory
        self.logger = get_logger("orchestrator")

    def run(self, config: IndexConfig, *, dry_run: bool = False) -> BuildOutcome:
        """Build the article index described by ``config``."""
        articles_dir = config.articles_dir
        if not articles_dir.exists():
            raise FileNotFoundError(f"Articles directory not found: {articles_dir}")
        if not articles_dir.is_dir():
            raise NotADirectoryError(f"Articles path is not a directory: {articles_dir}")

        self.logger.info("Building article index from %s", articles_dir)
        consumer = self.consumer_factory(config)
        writer = self.writer_factory(config.output_path)
        state = _RunState()

        def _on_error(message: str) -> None:
            raise ConsumerError(message)

        def _on_result(result: str) -> None:
            if state.result is not None:
                raise ConsumerError("Consumer produced more than one result")
            if dry_run:
                state.result = normalise_separators(result)
                self.logger.info("Dry-run completed; index not written")
                return
            state.result = result
            state.written = writer.write(result)

        consumer.errors.subscribe(_on_error)
        consumer.results.subscribe(_on_result)
        walker = ArticleWalker(consumer, public_root=config.public_dir)
        try:
            files = asyncio.run(walker.walk(articles_dir))
        finally:
            consumer.errors.unsubscribe(_on_error)
            consumer.results.unsubscribe(_on_result)

        if state.result is None:
            raise ConsumerError("Consumer finished without producing a result")
        self.logger.debug("Walker emitted %d files", files)

        return BuildOutcome(
            output_path=config.output_path,
            files=files,
            written=state.written,
            dry_run=dry_run,
            result=state.result if dry_run else None,
        )
