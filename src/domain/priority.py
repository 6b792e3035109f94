"""Thirteen-level priority scale shared by tasks and queue tiers."""

from __future__ import annotations

from enum import Enum


class Priority13(Enum):
    """Crawl priority levels.

    Values follow the fetch engine convention: the smaller the value, the more
    urgent the work. Each level owns a queue tier named after the lower-cased
    member name (``HIGHER3`` -> ``higher3``).
    """

    HIGHEST = -214748364
    HIGHER5 = -5000
    HIGHER4 = -4000
    HIGHER3 = -3000
    HIGHER2 = -2000
    HIGHER = -1000
    NORMAL = 0
    LOWER = 1000
    LOWER2 = 2000
    LOWER3 = 3000
    LOWER4 = 4000
    LOWER5 = 5000
    LOWEST = 214748364

    @property
    def tier_name(self) -> str:
        """Name of the queue tier serving this priority."""
        return self.name.lower()

    def is_higher_than(self, other: Priority13) -> bool:
        """Return True when this level should run before ``other``."""
        return self.value < other.value

    @classmethod
    def from_tier_name(cls, tier_name: str) -> Priority13:
        """Resolve a priority from its tier name."""
        return cls[tier_name.upper()]


__all__ = ["Priority13"]
