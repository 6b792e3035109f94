"""Thread-safe in-process frontier queues."""

from __future__ import annotations

import threading
from collections import Counter, deque

from src.domain.models import Hyperlink
from src.ports.url_queue import ReentrancyMode, UrlQueuePort


class InMemoryUrlQueue(UrlQueuePort):
    """FIFO url queue guarded by a single lock.

    In non-reentrant mode a url is tracked from enqueue until ``complete`` is
    called for it; a second enqueue during that time is rejected. The
    membership test and the insertion happen under the same lock.
    """

    def __init__(self, mode: ReentrancyMode, name: str = "") -> None:
        self._mode = mode
        self._name = name
        self._items: deque[Hyperlink] = deque()
        self._pending: Counter[str] = Counter()
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    @property
    def mode(self) -> ReentrancyMode:
        return self._mode

    @property
    def name(self) -> str:
        return self._name

    def enqueue(self, link: Hyperlink) -> bool:
        with self._lock:
            if self._mode is ReentrancyMode.NON_REENTRANT and (
                link.url in self._pending or link.url in self._in_flight
            ):
                return False
            self._items.append(link)
            self._pending[link.url] += 1
        return True

    def poll(self) -> Hyperlink | None:
        with self._lock:
            if not self._items:
                return None
            link = self._items.popleft()
            self._pending[link.url] -= 1
            if self._pending[link.url] <= 0:
                del self._pending[link.url]
            if self._mode is ReentrancyMode.NON_REENTRANT:
                self._in_flight.add(link.url)
            return link

    def complete(self, url: str) -> None:
        with self._lock:
            self._in_flight.discard(url)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._pending or url in self._in_flight

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __repr__(self) -> str:
        return f"InMemoryUrlQueue(name={self._name!r}, mode={self._mode.value}, size={len(self)})"


__all__ = ["InMemoryUrlQueue"]
