"""Protocol definitions for dependency inversion.

The dispatch core never fetches, parses or commits on its own. These
interfaces describe the collaborators it is wired with.
"""

from datetime import datetime
from typing import Protocol

from src.domain.models import FetchedPage, ResultRow
from src.domain.page_traits import PageTraits
from src.domain.relevance import RelevanceState


class DocumentProtocol(Protocol):
    """Parsed DOM of a fetched page, queried with CSS selectors."""

    def select_first_text(self, selector: str) -> str | None:
        """Text of the first matching element, or None if nothing matches."""
        ...

    def select_first_attr(self, selector: str, attr: str) -> str | None:
        """Attribute of the first matching element.

        Multi-valued attributes such as ``class`` are joined with spaces.
        """
        ...

    def select_hrefs(self, selector: str) -> list[str]:
        """Absolute hrefs of all matching anchors, in document order."""
        ...


class ExtractorProtocol(Protocol):
    """Maps a relevant page to an optional result row."""

    name: str
    is_root: bool

    def extract(
        self, page: FetchedPage, document: DocumentProtocol
    ) -> ResultRow | None:
        """Extract one record from the page.

        Raises:
            Exception: Extraction failures propagate to the caller
        """
        ...


class BaseRelevanceCheck(Protocol):
    """Finer-grained relevance check run after the domain check."""

    def __call__(self, page: FetchedPage) -> RelevanceState: ...


class PendingResultManagerProtocol(Protocol):
    """Accumulates result rows and commits them to the sink in batches."""

    sync_batch_size: int

    @property
    def result_count(self) -> int:
        """Number of rows observed since start."""
        ...

    def add(
        self,
        collection: str,
        extractor_name: str,
        row: ResultRow,
        dead_time: datetime | None,
    ) -> None:
        """Queue a row for commit, no later than ``dead_time``."""
        ...

    def flush_expired(self) -> int:
        """Commit batches whose dead time has passed. Returns rows committed."""
        ...


class StatusReporterProtocol(Protocol):
    """Free-text quality reports for operators."""

    def report_extracted_null_fields(self, message: str) -> None: ...


class DocumentSinkProtocol(Protocol):
    """Persists exported documents."""

    def save(self, text: str, path: str) -> None: ...


class SiteCapabilities(Protocol):
    """Site-specific behaviour plugged into the extraction pipeline."""

    def is_target_site(self, url: str) -> bool: ...

    def is_detail_page(self, url: str) -> bool: ...

    def classify(self, url: str, document: DocumentProtocol | None = None) -> PageTraits: ...

    def collect_links(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        *,
        asin_extractor: bool,
    ) -> None: ...

    def check_fields(self, url: str, row: ResultRow) -> list[str] | None:
        """Null fields worth reporting, or None when the row is acceptable."""
        ...


__all__ = [
    "BaseRelevanceCheck",
    "DocumentProtocol",
    "DocumentSinkProtocol",
    "ExtractorProtocol",
    "PendingResultManagerProtocol",
    "SiteCapabilities",
    "StatusReporterProtocol",
]
