"""Named priority tiers of the crawl frontier.

Every tier holds one reentrant queue, for pages revisited on a schedule such
as catalogue rankings, and one non-reentrant queue, for one-shot detail and
review pages. The pool is created once per process and shared by all page
processors.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator

from src.adapters.url_queue_inmemory import InMemoryUrlQueue
from src.config.logging_config import get_logger
from src.domain.exceptions import UnknownTierError
from src.domain.models import Hyperlink
from src.domain.priority import Priority13
from src.observability.metrics import LINKS_ENQUEUED_TOTAL
from src.ports.url_queue import ReentrancyMode, UrlQueuePort

logger = get_logger(__name__)

QueueFactory = Callable[[ReentrancyMode, str], UrlQueuePort]


def _default_queue_factory(mode: ReentrancyMode, name: str) -> UrlQueuePort:
    return InMemoryUrlQueue(mode, name=name)


class QueueTier:
    """A priority bucket with its two queues."""

    def __init__(
        self,
        priority: Priority13,
        queue_factory: QueueFactory = _default_queue_factory,
    ) -> None:
        self.priority = priority
        self.name = priority.tier_name
        self._queues: dict[ReentrancyMode, UrlQueuePort] = {
            mode: queue_factory(mode, f"{self.name}.{mode.value}")
            for mode in ReentrancyMode
        }

    @property
    def reentrant_queue(self) -> UrlQueuePort:
        return self._queues[ReentrancyMode.REENTRANT]

    @property
    def non_reentrant_queue(self) -> UrlQueuePort:
        return self._queues[ReentrancyMode.NON_REENTRANT]

    def queue(self, mode: ReentrancyMode) -> UrlQueuePort:
        return self._queues[mode]

    def enqueue(self, link: Hyperlink, mode: ReentrancyMode) -> bool:
        """Offer a link to the queue of the given mode and count the outcome."""
        accepted = self._queues[mode].enqueue(link)
        LINKS_ENQUEUED_TOTAL.labels(
            tier=self.name, mode=mode.value, accepted=str(accepted).lower()
        ).inc()
        return accepted

    def __len__(self) -> int:
        return sum(len(queue) for queue in self._queues.values())


class QueuePool:
    """All tiers of the frontier, keyed by tier name."""

    def __init__(self, queue_factory: QueueFactory = _default_queue_factory) -> None:
        self._tiers: dict[str, QueueTier] = {
            priority.tier_name: QueueTier(priority, queue_factory)
            for priority in Priority13
        }

    def tier(self, name: str) -> QueueTier:
        """Look up a tier by name.

        Raises:
            UnknownTierError: If the pool has no tier with that name
        """
        try:
            return self._tiers[name]
        except KeyError:
            raise UnknownTierError(name) from None

    def tier_for(self, priority: Priority13) -> QueueTier:
        return self._tiers[priority.tier_name]

    def enqueue(self, tier_name: str, link: Hyperlink, mode: ReentrancyMode) -> bool:
        return self.tier(tier_name).enqueue(link, mode)

    def sizes(self) -> dict[str, int]:
        """Waiting links per tier."""
        return {name: len(tier) for name, tier in self._tiers.items()}

    def __iter__(self) -> Iterator[QueueTier]:
        return iter(self._tiers.values())

    def __len__(self) -> int:
        return sum(len(tier) for tier in self._tiers.values())


_pool: QueuePool | None = None
_pool_lock = threading.Lock()


def get_queue_pool() -> QueuePool:
    """Get or create the process-wide queue pool."""
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = QueuePool()
            logger.info("queue_pool_created", tiers=[priority.tier_name for priority in Priority13])
        return _pool


__all__ = ["QueuePool", "QueueTier", "get_queue_pool"]
