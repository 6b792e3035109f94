from __future__ import annotations

import threading

import pytest

from src.adapters.url_queue_inmemory import InMemoryUrlQueue
from src.domain.exceptions import UnknownTierError
from src.domain.models import Hyperlink
from src.domain.priority import Priority13
from src.ports.url_queue import ReentrancyMode, UrlQueuePort
from src.services.queue_pool import QueuePool, get_queue_pool
from tests.conftest import sample_value

URL = "https://www.amazon.com/dp/B08N5WRWNW"


def test_pool_has_one_tier_per_priority(pool: QueuePool) -> None:
    names = [tier.name for tier in pool]

    assert names == [priority.tier_name for priority in Priority13]
    assert pool.tier("lower2").priority is Priority13.LOWER2
    assert pool.tier_for(Priority13.HIGHER3) is pool.tier("higher3")
    assert isinstance(pool.tier("normal").reentrant_queue, UrlQueuePort)


def test_unknown_tier_raises(pool: QueuePool) -> None:
    with pytest.raises(UnknownTierError) as exc_info:
        pool.tier("urgent")

    assert exc_info.value.tier_name == "urgent"
    assert "urgent" in str(exc_info.value)

    with pytest.raises(KeyError):
        pool.enqueue("urgent", Hyperlink(URL), ReentrancyMode.REENTRANT)


def test_non_reentrant_enqueue_is_idempotent_while_pending(pool: QueuePool) -> None:
    tier = pool.tier("lower2")

    assert tier.enqueue(Hyperlink(URL), ReentrancyMode.NON_REENTRANT)
    assert not tier.enqueue(Hyperlink(URL, label="asin"), ReentrancyMode.NON_REENTRANT)
    assert len(tier.non_reentrant_queue) == 1


def test_non_reentrant_rejects_in_flight_until_completed() -> None:
    queue = InMemoryUrlQueue(ReentrancyMode.NON_REENTRANT, name="lower3.non_reentrant")
    queue.enqueue(Hyperlink(URL))

    polled = queue.poll()

    assert polled is not None and polled.url == URL
    assert URL in queue
    assert not queue.enqueue(Hyperlink(URL))

    queue.complete(URL)

    assert URL not in queue
    assert queue.enqueue(Hyperlink(URL))


def test_reentrant_accepts_duplicates(pool: QueuePool) -> None:
    tier = pool.tier("higher3")

    assert tier.enqueue(Hyperlink(URL), ReentrancyMode.REENTRANT)
    assert tier.enqueue(Hyperlink(URL), ReentrancyMode.REENTRANT)
    assert len(tier.reentrant_queue) == 2
    assert pool.sizes()["higher3"] == 2
    assert len(pool) == 2


def test_queue_is_fifo() -> None:
    queue = InMemoryUrlQueue(ReentrancyMode.REENTRANT)
    for index in range(3):
        queue.enqueue(Hyperlink(f"{URL}?i={index}"))

    polled = [queue.poll() for _ in range(4)]

    assert [link.url if link else None for link in polled] == [
        f"{URL}?i=0",
        f"{URL}?i=1",
        f"{URL}?i=2",
        None,
    ]


def test_concurrent_non_reentrant_enqueue_accepts_once(pool: QueuePool) -> None:
    tier = pool.tier("lower3")
    barrier = threading.Barrier(8)
    results: list[bool] = []
    results_lock = threading.Lock()

    def _offer() -> None:
        barrier.wait()
        accepted = tier.enqueue(Hyperlink(URL), ReentrancyMode.NON_REENTRANT)
        with results_lock:
            results.append(accepted)

    threads = [threading.Thread(target=_offer) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert len(tier.non_reentrant_queue) == 1


def test_enqueue_outcome_is_counted(pool: QueuePool) -> None:
    labels = {"tier": "lower4", "mode": "non_reentrant", "accepted": "false"}
    before = sample_value("amazon_links_enqueued_total", labels)

    pool.enqueue("lower4", Hyperlink(URL), ReentrancyMode.NON_REENTRANT)
    pool.enqueue("lower4", Hyperlink(URL), ReentrancyMode.NON_REENTRANT)

    assert sample_value("amazon_links_enqueued_total", labels) == before + 1


def test_process_pool_is_singleton() -> None:
    assert get_queue_pool() is get_queue_pool()
