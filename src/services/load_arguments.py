"""Load argument strings attached to queued urls.

The fetch engine reads options such as ``-label zgbs -expires PT24H`` from
each queued url; durations use the ISO-8601 form the engine parses.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from src.domain.task_schedule import TaskDefinition, definitions


def format_duration(value: timedelta) -> str:
    """ISO-8601 duration in hours, minutes and seconds.

    Example:
        >>> format_duration(timedelta(days=1))
        'PT24H'
        >>> format_duration(timedelta(minutes=90))
        'PT1H30M'
    """
    total = int(value.total_seconds())
    if total == 0:
        return "PT0S"
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    parts = [f"{hours}H" if hours else "", f"{minutes}M" if minutes else "", f"{seconds}S" if seconds else ""]
    return f"{sign}PT{''.join(parts)}"


def build_load_args(
    label: str,
    expires: timedelta | None = None,
    *,
    dead_time: datetime | None = None,
    refresh: bool = False,
    store_content: bool = False,
) -> str:
    args = [f"-label {label}"]
    if expires is not None:
        args.append(f"-expires {format_duration(expires)}")
    if dead_time is not None:
        args.append(f"-deadTime {dead_time.isoformat()}")
    if refresh:
        args.append("-refresh")
    if store_content:
        args.append("-storeContent")
    return " ".join(args)


def task_for_label(label: str) -> TaskDefinition | None:
    """First task of the schedule carrying the label."""
    return next((task for task in definitions() if task.label == label), None)


def load_args_for_label(label: str) -> str:
    task = task_for_label(label)
    if task is None:
        return build_load_args(label)
    return build_load_args(label, task.expires, store_content=task.store_content)


def load_args_for_task(task: TaskDefinition, now: datetime) -> str:
    return build_load_args(
        task.label,
        task.expires,
        dead_time=task.dead_time(now),
        refresh=task.refresh,
        store_content=task.store_content,
    )


__all__ = [
    "build_load_args",
    "format_duration",
    "load_args_for_label",
    "load_args_for_task",
    "task_for_label",
]
