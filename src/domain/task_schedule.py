"""Catalogue of recurring crawl tasks.

The schedule is a fixed, ordered table of immutable task definitions known at
process start. Time windows are pure functions of a reference instant; the
external scheduler evaluates them, nothing here blocks or sleeps.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Final

from src.domain.exceptions import InvalidTaskWindowError
from src.domain.priority import Priority13
from src.domain.time_windows import (
    SECONDS_PER_DAY,
    end_of_day,
    end_of_hour,
    start_of_day,
    start_of_hour,
    time_point_of_day,
)

WindowFunction = Callable[[datetime], datetime]


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    """One recurring crawl task.

    Attributes:
        name: Stable task identity (enum-style constant name).
        label: Routing key shared with classified pages and fetch options.
        priority: Urgency of the task's URLs.
        period: Nominal recurrence interval.
        expires: How long fetched content of produced URLs stays fresh.
        dead_fn: Cutoff after which pending results must be committed.
        start_fn: Start of the window in which the task may run.
        end_fn: End of the window; the task is dropped after it.
        file_name: Seed URL list identity, if the task is seeded.
        ignore_ttl: Run at any time, ignoring the window.
        refresh: Force re-fetch of pages.
        store_content: Keep fetched page content.
    """

    name: str
    label: str
    priority: Priority13
    period: timedelta
    expires: timedelta
    dead_fn: WindowFunction
    start_fn: WindowFunction
    end_fn: WindowFunction
    file_name: str | None = None
    ignore_ttl: bool = False
    refresh: bool = False
    store_content: bool = False

    def dead_time(self, now: datetime | None = None) -> datetime:
        return self.dead_fn(now or _local_now())

    def start_time(self, now: datetime | None = None) -> datetime:
        return self.start_fn(now or _local_now())

    def end_time(self, now: datetime | None = None) -> datetime:
        return self.end_fn(now or _local_now())

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once ``now`` is past the window end, unless TTL is ignored."""
        now = now or _local_now()
        return not self.ignore_ttl and now > self.end_time(now)

    def is_in_window(self, now: datetime | None = None) -> bool:
        now = now or _local_now()
        if self.ignore_ttl:
            return True
        return self.start_time(now) <= now <= self.end_time(now)


@dataclass(frozen=True, slots=True)
class SchedulableTask:
    """The shape handed to the external scheduler."""

    ordinal: int
    name: str
    label: str
    priority: Priority13
    period: timedelta
    expires: timedelta
    dead_time: WindowFunction
    start_time: WindowFunction
    end_time: WindowFunction
    file_name: str | None
    ignore_ttl: bool
    refresh: bool
    store_content: bool


MOVERS_AND_SHAKERS: Final[TaskDefinition] = TaskDefinition(
    name="MOVERS_AND_SHAKERS",
    label="movers-and-shakers",
    priority=Priority13.HIGHER3,
    period=timedelta(hours=1),
    expires=timedelta(hours=1),
    dead_fn=end_of_hour,
    start_fn=start_of_hour,
    end_fn=end_of_hour,
    file_name="movers-and-shakers.txt",
)

BEST_SELLERS: Final[TaskDefinition] = TaskDefinition(
    name="BEST_SELLERS",
    label="zgbs",
    priority=Priority13.NORMAL,
    period=timedelta(days=1),
    expires=timedelta(days=1),
    dead_fn=end_of_day,
    start_fn=lambda now: time_point_of_day(now, 9),
    end_fn=lambda now: time_point_of_day(now, 23, 30),
    file_name="best-sellers.txt",
    store_content=True,
)

MOST_WISHED_FOR: Final[TaskDefinition] = TaskDefinition(
    name="MOST_WISHED_FOR",
    label="most-wished-for",
    priority=Priority13.NORMAL,
    period=timedelta(days=1),
    expires=timedelta(days=1),
    dead_fn=end_of_day,
    start_fn=start_of_day,
    end_fn=lambda now: time_point_of_day(now, 23, 30),
    file_name="most-wished-for.txt",
    store_content=True,
)

NEW_RELEASES: Final[TaskDefinition] = TaskDefinition(
    name="NEW_RELEASES",
    label="new-releases",
    priority=Priority13.NORMAL,
    period=timedelta(days=1),
    expires=timedelta(days=1),
    dead_fn=end_of_day,
    start_fn=start_of_day,
    end_fn=lambda now: time_point_of_day(now, 23, 30),
    file_name="new-releases.txt",
    store_content=True,
)

ASIN: Final[TaskDefinition] = TaskDefinition(
    name="ASIN",
    label="asin",
    priority=Priority13.LOWER2,
    period=timedelta(days=1),
    expires=timedelta(days=30),
    dead_fn=end_of_day,
    start_fn=lambda now: time_point_of_day(now, 1),
    end_fn=lambda now: time_point_of_day(now, 23, 50),
)

# Reviews are collected overnight, so the window spills into the next day.
REVIEW: Final[TaskDefinition] = TaskDefinition(
    name="REVIEW",
    label="review",
    priority=Priority13.LOWER3,
    period=timedelta(days=1),
    expires=timedelta(days=300),
    dead_fn=lambda now: end_of_day(now) + timedelta(seconds=SECONDS_PER_DAY),
    start_fn=lambda now: time_point_of_day(now, 23, 30),
    end_fn=lambda now: end_of_day(now) + timedelta(seconds=SECONDS_PER_DAY),
)

BEST_SELLERS7D: Final[TaskDefinition] = TaskDefinition(
    name="BEST_SELLERS7D",
    label="zgbs",
    priority=Priority13.NORMAL,
    period=timedelta(days=7),
    expires=timedelta(days=7),
    dead_fn=end_of_day,
    start_fn=start_of_day,
    end_fn=lambda now: now + timedelta(days=7),
    file_name="best-sellers.txt",
    store_content=True,
)

_DEFINITIONS: Final[tuple[TaskDefinition, ...]] = (
    MOVERS_AND_SHAKERS,
    BEST_SELLERS,
    MOST_WISHED_FOR,
    NEW_RELEASES,
    ASIN,
    REVIEW,
    BEST_SELLERS7D,
)


def definitions() -> tuple[TaskDefinition, ...]:
    """All predefined tasks, in ordinal order."""
    return _DEFINITIONS


def get_task(name: str) -> TaskDefinition:
    """Look up a task by name.

    Raises:
        KeyError: If no task has that name
    """
    for task in _DEFINITIONS:
        if task.name == name:
            return task
    raise KeyError(f"Unknown task: {name}")


def ordinal_of(task: TaskDefinition) -> int:
    return _DEFINITIONS.index(task)


def to_schedulable(task: TaskDefinition) -> SchedulableTask:
    """Project a task definition onto the scheduler-facing shape."""
    return SchedulableTask(
        ordinal=ordinal_of(task),
        name=task.name,
        label=task.label,
        priority=task.priority,
        period=task.period,
        expires=task.expires,
        dead_time=task.dead_fn,
        start_time=task.start_fn,
        end_time=task.end_fn,
        file_name=task.file_name,
        ignore_ttl=task.ignore_ttl,
        refresh=task.refresh,
        store_content=task.store_content,
    )


def validate_schedule(
    now: datetime | None = None,
    tasks: tuple[TaskDefinition, ...] | None = None,
) -> None:
    """Check that every window is well formed at ``now``.

    Raises:
        InvalidTaskWindowError: If a task ends before it starts
    """
    now = now or _local_now()
    for task in tasks if tasks is not None else _DEFINITIONS:
        start = task.start_time(now)
        end = task.end_time(now)
        if end < start:
            raise InvalidTaskWindowError(task.name, start, end)


def eligible_tasks(now: datetime | None = None) -> list[TaskDefinition]:
    """Tasks whose window contains ``now``, most urgent first."""
    now = now or _local_now()
    runnable = [task for task in _DEFINITIONS if task.is_in_window(now)]
    return sorted(runnable, key=lambda task: (task.priority.value, ordinal_of(task)))


__all__ = [
    "ASIN",
    "BEST_SELLERS",
    "BEST_SELLERS7D",
    "MOST_WISHED_FOR",
    "MOVERS_AND_SHAKERS",
    "NEW_RELEASES",
    "REVIEW",
    "SchedulableTask",
    "TaskDefinition",
    "WindowFunction",
    "definitions",
    "eligible_tasks",
    "get_task",
    "ordinal_of",
    "to_schedulable",
    "validate_schedule",
]
