"""Wall-clock window helpers for recurring crawl tasks.

Every helper is a pure function of a reference instant. Results are expressed
in the reference instant's timezone, so callers decide the crawl zone by
passing ``now`` already converted (see ``src.use_cases.crawl_scheduler``).
pytz zones are localized through ``tzinfo.localize`` so DST transitions
resolve to the correct offset.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Final

SECONDS_PER_DAY: Final[int] = 24 * 3600
_END_MARGIN: Final[timedelta] = timedelta(seconds=1)


def _at(reference: datetime, day: date, clock: time) -> datetime:
    tz = reference.tzinfo
    naive = datetime.combine(day, clock)
    localize = getattr(tz, "localize", None)
    if callable(localize):
        return localize(naive)
    return naive.replace(tzinfo=tz)


def start_of_hour(now: datetime) -> datetime:
    """First instant of the hour containing ``now``."""
    return _at(now, now.date(), time(now.hour))


def end_of_hour(now: datetime) -> datetime:
    """Last second of the hour containing ``now``."""
    return start_of_hour(now) + timedelta(hours=1) - _END_MARGIN


def start_of_day(now: datetime) -> datetime:
    """Local midnight of the day containing ``now``."""
    return _at(now, now.date(), time.min)


def end_of_day(now: datetime) -> datetime:
    """Last second of the local day containing ``now``."""
    return _at(now, now.date() + timedelta(days=1), time.min) - _END_MARGIN


def time_point_of_day(now: datetime, hour: int, minute: int = 0) -> datetime:
    """The given wall-clock time on the local day containing ``now``."""
    return _at(now, now.date(), time(hour, minute))


__all__ = [
    "SECONDS_PER_DAY",
    "end_of_day",
    "end_of_hour",
    "start_of_day",
    "start_of_hour",
    "time_point_of_day",
]
