"""Port definition for crawl frontier queues."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable

from src.domain.models import Hyperlink


class ReentrancyMode(StrEnum):
    """Whether a url may be queued again before it was processed."""

    REENTRANT = "reentrant"
    NON_REENTRANT = "non_reentrant"


@runtime_checkable
class UrlQueuePort(Protocol):
    """Abstract interface implemented by frontier queue adapters."""

    @property
    def mode(self) -> ReentrancyMode:
        """Reentrancy mode of the queue."""

    def enqueue(self, link: Hyperlink) -> bool:
        """Queue a link. Returns False when the queue rejects it."""

    def poll(self) -> Hyperlink | None:
        """Take the oldest link, or None when empty."""

    def complete(self, url: str) -> None:
        """Mark a polled url as processed."""

    def __contains__(self, url: object) -> bool:
        """True if the url is pending or in flight."""

    def __len__(self) -> int:
        """Number of links waiting to be polled."""


__all__ = ["ReentrancyMode", "UrlQueuePort"]
