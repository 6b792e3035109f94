"""Outcome of the relevance check for a fetched page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from src.domain.extraction_constants import (
    IRRELEVANT_LOG_MIN_CODE,
    IRRELEVANT_SILENT_CODES,
    NOT_TARGET_SITE_CODE,
)


@dataclass(frozen=True, slots=True)
class RelevanceState:
    """Status code and message produced by the relevance gate.

    Code 0 means the page is relevant; any other code explains why it is not.
    """

    code: int = 0
    message: str = ""

    OK_CODE: ClassVar[int] = 0

    @property
    def is_ok(self) -> bool:
        return self.code == self.OK_CODE

    @property
    def should_log(self) -> bool:
        """Whether this irrelevance is worth a diagnostic log line."""
        return (
            not self.is_ok
            and self.code >= IRRELEVANT_LOG_MIN_CODE
            and self.code not in IRRELEVANT_SILENT_CODES
        )


RELEVANT = RelevanceState()
NOT_TARGET_SITE = RelevanceState(NOT_TARGET_SITE_CODE, "not amazon")

__all__ = ["NOT_TARGET_SITE", "RELEVANT", "RelevanceState"]
