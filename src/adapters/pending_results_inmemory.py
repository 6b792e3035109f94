"""In-process pending result manager for development and testing."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime

from src.config.logging_config import get_logger
from src.domain.extraction_constants import DEFAULT_SYNC_BATCH_SIZE
from src.domain.models import ResultRow
from src.domain.protocols import PendingResultManagerProtocol

logger = get_logger(__name__)

CommitHandler = Callable[[str, str, list[ResultRow]], None]
BatchKey = tuple[str, str]


def _log_commit(collection: str, extractor_name: str, rows: list[ResultRow]) -> None:
    logger.info(
        "pending_results_committed",
        collection=collection,
        extractor=extractor_name,
        rows=len(rows),
    )


class InMemoryPendingResultManager(PendingResultManagerProtocol):
    """Batches rows per (collection, extractor) and commits them.

    A batch is committed when it reaches ``sync_batch_size`` rows, or as soon
    as a row arrives whose dead time has already passed. ``flush_expired``
    lets a caller commit batches whose dead time passed without new rows.
    """

    def __init__(
        self,
        commit: CommitHandler = _log_commit,
        *,
        sync_batch_size: int = DEFAULT_SYNC_BATCH_SIZE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if sync_batch_size <= 0:
            raise ValueError("sync_batch_size must be positive")
        self._commit = commit
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._lock = threading.Lock()
        self._batches: dict[BatchKey, list[ResultRow]] = {}
        self._deadlines: dict[BatchKey, datetime] = {}
        self._result_count = 0
        self.sync_batch_size = sync_batch_size

    @property
    def result_count(self) -> int:
        with self._lock:
            return self._result_count

    def add(
        self,
        collection: str,
        extractor_name: str,
        row: ResultRow,
        dead_time: datetime | None,
    ) -> None:
        if dead_time is not None and dead_time.tzinfo is None:
            raise ValueError("dead_time must be timezone-aware")

        key = (collection, extractor_name)
        with self._lock:
            self._result_count += 1
            batch = self._batches.setdefault(key, [])
            batch.append(row)
            if dead_time is not None:
                current = self._deadlines.get(key)
                if current is None or dead_time < current:
                    self._deadlines[key] = dead_time
            ready = self._take_if_ready(key)

        if ready:
            self._commit(collection, extractor_name, ready)

    def flush_expired(self) -> int:
        """Commit batches whose dead time has passed. Returns rows committed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, deadline in self._deadlines.items() if deadline <= now]
            taken = [(key, self._take(key)) for key in expired]
        return self._commit_all(taken)

    def flush_all(self) -> int:
        """Commit every pending batch. Returns rows committed."""
        with self._lock:
            taken = [(key, self._take(key)) for key in list(self._batches)]
        return self._commit_all(taken)

    def pending_count(self) -> int:
        with self._lock:
            return sum(len(batch) for batch in self._batches.values())

    def _take_if_ready(self, key: BatchKey) -> list[ResultRow]:
        batch = self._batches.get(key, [])
        deadline = self._deadlines.get(key)
        if len(batch) >= self.sync_batch_size or (
            deadline is not None and deadline <= self._clock()
        ):
            return self._take(key)
        return []

    def _take(self, key: BatchKey) -> list[ResultRow]:
        self._deadlines.pop(key, None)
        return self._batches.pop(key, [])

    def _commit_all(self, taken: list[tuple[BatchKey, list[ResultRow]]]) -> int:
        committed = 0
        for (collection, extractor_name), rows in taken:
            if rows:
                self._commit(collection, extractor_name, rows)
                committed += len(rows)
        return committed


__all__ = ["InMemoryPendingResultManager"]
