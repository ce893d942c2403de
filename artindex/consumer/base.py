"""Boundary contract between the traversal driver and an index consumer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, List, TypeVar

from ..models import FileEntry

T = TypeVar("T")


class IndexBuildError(RuntimeError):
    """Base class for fatal errors raised while building an index."""


class ConsumerError(IndexBuildError):
    """Raised when the consumer reports an error signal."""


class Port(Generic[T]):
    """Outbound channel that fans a value out to its subscribers."""

    def __init__(self) -> None:
        self._subscribers: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[T], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def send(self, value: T) -> None:
        # Subscriber exceptions propagate to the sender.
        for callback in list(self._subscribers):
            callback(value)


class IndexConsumer(ABC):
    """Accepts file entries plus one end-of-input signal and emits an error or a result."""

    def __init__(self) -> None:
        self.errors: Port[str] = Port()
        self.results: Port[str] = Port()

    @abstractmethod
    def receive_input(self, entry: FileEntry) -> None:
        """Accept one file entry; entries may arrive in any order."""

    @abstractmethod
    def receive_end_of_input(self) -> None:
        """Signal that no further entries will be sent."""
