"""Enqueue seed urls of the recurring tasks that are due."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from src.config.logging_config import get_logger
from src.domain.models import Hyperlink
from src.domain.task_schedule import TaskDefinition, eligible_tasks
from src.ports.url_queue import ReentrancyMode
from src.services.load_arguments import load_args_for_task
from src.services.queue_pool import QueuePool
from src.services.seed_loader import SeedLoader

logger = get_logger(__name__)

SCHEDULER_REFERRER = "scheduler"


@dataclass(slots=True)
class TaskScheduleResult:
    """Summary of one scheduler iteration."""

    scheduled_at: datetime
    tasks: list[str] = field(default_factory=list)
    not_due: list[str] = field(default_factory=list)
    enqueued: int = 0
    rejected: int = 0
    flushed: int = 0

    @property
    def task_count(self) -> int:
        return len(self.tasks)


class TaskRunLedger:
    """Remembers when each task last ran so it runs once per period.

    A run is anchored at the start of the task's window, not at the instant
    the scheduler happened to wake up, so the next run does not drift later
    by one scheduler interval every period.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._anchors: dict[str, datetime] = {}

    def last_run(self, task: TaskDefinition) -> datetime | None:
        with self._lock:
            return self._anchors.get(task.name)

    def is_due(self, task: TaskDefinition, now: datetime) -> bool:
        last = self.last_run(task)
        return last is None or now - last >= task.period

    def mark_run(self, task: TaskDefinition, now: datetime) -> datetime:
        start = task.start_time(now)
        anchor = start if start <= now else now
        with self._lock:
            self._anchors[task.name] = anchor
        return anchor


def enqueue_task_seeds(
    pool: QueuePool,
    seed_loader: SeedLoader,
    task: TaskDefinition,
    now: datetime,
) -> tuple[int, int]:
    """Enqueue the seeds of one task. Returns (enqueued, rejected)."""
    if task.file_name is None:
        return 0, 0

    args = load_args_for_task(task, now)
    tier = pool.tier_for(task.priority)
    enqueued = rejected = 0
    for url in seed_loader.load(task.file_name):
        link = Hyperlink(url=url, label=task.label, referrer=SCHEDULER_REFERRER, args=args)
        if tier.enqueue(link, ReentrancyMode.REENTRANT):
            enqueued += 1
        else:
            rejected += 1
    return enqueued, rejected


def enqueue_due_tasks(
    pool: QueuePool,
    seed_loader: SeedLoader,
    now: datetime,
    ledger: TaskRunLedger | None = None,
) -> TaskScheduleResult:
    """Enqueue seeds for every task whose window contains ``now`` and whose
    period has elapsed since its last run.

    ``now`` must be timezone-aware in the crawl timezone; task windows are
    computed on its local calendar. Without a ``ledger`` every open task is
    treated as due.
    """
    ledger = ledger or TaskRunLedger()
    result = TaskScheduleResult(scheduled_at=now)
    for task in eligible_tasks(now):
        if task.file_name is None:
            continue
        if not ledger.is_due(task, now):
            result.not_due.append(task.name)
            continue
        enqueued, rejected = enqueue_task_seeds(pool, seed_loader, task, now)
        ledger.mark_run(task, now)
        result.tasks.append(task.name)
        result.enqueued += enqueued
        result.rejected += rejected
        logger.info(
            "task_seeds_enqueued",
            task=task.name,
            label=task.label,
            tier=task.priority.tier_name,
            enqueued=enqueued,
            rejected=rejected,
        )

    logger.info(
        "crawl_schedule_iteration_completed",
        scheduled_at=now.isoformat(),
        tasks=result.task_count,
        not_due=len(result.not_due),
        enqueued=result.enqueued,
    )
    return result


__all__ = ["TaskRunLedger", "TaskScheduleResult", "enqueue_due_tasks", "enqueue_task_seeds"]
