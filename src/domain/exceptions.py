"""Custom exception hierarchy for the crawl dispatch core.

Irrelevant pages, null extracted fields, missing secondary links and an
unconfigured sink are expected outcomes and never raise. Exceptions are kept
for configuration problems and programming errors at the seams.
"""


class CrawlDispatchError(Exception):
    """Base exception for all application errors."""

    pass


class ConfigurationError(CrawlDispatchError):
    """Invalid or inconsistent configuration."""

    pass


class InvalidTaskWindowError(ConfigurationError):
    """A task definition produced an end time before its start time."""

    def __init__(self, task_name: str, start: object, end: object) -> None:
        """Initialize with the offending task and its window."""
        self.task_name = task_name
        self.start = start
        self.end = end
        super().__init__(
            f"Task {task_name} has end time {end} before start time {start}"
        )


class UnknownTierError(CrawlDispatchError, KeyError):
    """Lookup of a queue tier that the pool does not hold."""

    def __init__(self, tier_name: str) -> None:
        """Initialize with the requested tier name."""
        self.tier_name = tier_name
        super().__init__(f"Unknown queue tier: {tier_name}")

    def __str__(self) -> str:
        return str(self.args[0])
