"""Asynchronous directory traversal that feeds article files to a consumer."""

from __future__ import annotations

import asyncio
import os
import stat
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List

from .consumer.base import IndexBuildError, IndexConsumer
from .logging import get_logger
from .models import FileEntry


class WalkError(IndexBuildError):
    """Fatal filesystem error raised while walking the article tree."""

    action = "access"

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not {self.action} {path}: {cause.strerror or cause}")


class DirectoryListingError(WalkError):
    """Raised when a directory cannot be listed."""

    action = "list directory"


class FileStatError(WalkError):
    """Raised when an entry cannot be stat-ed."""

    action = "stat"


class FileReadError(WalkError):
    """Raised when a file cannot be read."""

    action = "read file"


class _PendingWork:
    """Counts listings and reads in flight and fires a callback when none remain."""

    def __init__(self, on_drained: Callable[[], None]) -> None:
        self._count = 0
        self._on_drained = on_drained
        self.drained = False

    def add(self, amount: int = 1) -> None:
        self._count += amount

    def done(self) -> None:
        self._count -= 1
        if self._count == 0:
            self.drained = True
            self._on_drained()


class ArticleWalker:
    """Walks an article tree and streams every regular file to an index consumer."""

    def __init__(self, consumer: IndexConsumer, *, public_root: Path) -> None:
        self.consumer = consumer
        self.public_root = Path(public_root).resolve()
        self.logger = get_logger("walker")
        self._emitted = 0

    async def walk(self, root: Path) -> int:
        """Emit every regular file under ``root`` and return how many were sent.

        Sibling entries are dispatched concurrently. End of input is signalled
        once every listing and read in the tree has completed. The first
        filesystem error aborts the walk and propagates without signalling end
        of input.
        """
        root_path = Path(root).resolve()
        if not root_path.is_relative_to(self.public_root):
            raise ValueError(f"{root_path} is not inside public root {self.public_root}")

        self._emitted = 0
        pending = _PendingWork(self._finish)
        pending.add()
        self.logger.debug("Walking %s", root_path)
        await self._visit_directory(root_path, pending)
        if not pending.drained:  # pragma: no cover - every path releases its unit
            raise RuntimeError("Walk completed with work still pending")
        return self._emitted

    # ------------------------------------------------------------------
    # Traversal helpers

    async def _visit_directory(self, directory: Path, pending: _PendingWork) -> None:
        loop = asyncio.get_running_loop()
        try:
            names = await loop.run_in_executor(None, _list_directory, directory)
        except OSError as exc:
            raise DirectoryListingError(directory, exc) from exc

        # Children are registered before the listing releases its own unit.
        pending.add(len(names))
        pending.done()
        await _gather_or_cancel(self._visit_entry(directory / name, pending) for name in names)

    async def _visit_entry(self, path: Path, pending: _PendingWork) -> None:
        loop = asyncio.get_running_loop()
        try:
            stat_result = await loop.run_in_executor(None, _stat, path)
        except OSError as exc:
            raise FileStatError(path, exc) from exc

        if stat.S_ISDIR(stat_result.st_mode):
            await self._visit_directory(path, pending)
            return
        if not stat.S_ISREG(stat_result.st_mode):
            self.logger.debug("Skipping %s: not a regular file", path)
            pending.done()
            return

        try:
            content = await loop.run_in_executor(None, _read_text, path)
        except OSError as exc:
            raise FileReadError(path, exc) from exc

        self._emit(path, content)
        pending.done()

    def _emit(self, path: Path, content: str) -> None:
        relative_path = path.relative_to(self.public_root).as_posix()
        self.consumer.receive_input(FileEntry(relative_path=relative_path, content=content))
        self._emitted += 1
        self.logger.debug("Emitted %s", relative_path)

    def _finish(self) -> None:
        self.logger.debug("All %d files emitted; signalling end of input", self._emitted)
        self.consumer.receive_end_of_input()


async def _gather_or_cancel(awaitables: Iterable[Awaitable[None]]) -> None:
    """Await all awaitables, cancelling the rest as soon as one fails."""
    tasks: List[asyncio.Future[None]] = [asyncio.ensure_future(item) for item in awaitables]
    if not tasks:
        return
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _list_directory(directory: Path) -> List[str]:
    return sorted(os.listdir(directory))


def _stat(path: Path) -> os.stat_result:
    return os.stat(path)


def _read_text(path: Path) -> str:
    with path.open("r", encoding="utf-8", errors="replace", newline="") as handle:
        return handle.read()


__all__ = [
    "ArticleWalker",
    "DirectoryListingError",
    "FileReadError",
    "FileStatError",
    "WalkError",
]
