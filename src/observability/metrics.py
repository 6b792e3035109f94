"""Prometheus metrics for the crawl dispatch core.

All metrics live in the default prometheus registry and are process wide.
Counters only ever increase, so concurrent page processors can mark them
without coordination. The HTTP exporter is started explicitly by entrypoints
through ``ensure_metrics_exporter``.
"""

from __future__ import annotations

import threading
from typing import Final

from prometheus_client import Counter, Info, start_http_server

from src.config.logging_config import get_logger

logger = get_logger(__name__)

RELEVANCE_CHECKS_TOTAL: Final[Counter] = Counter(
    "amazon_relevance_checks_total",
    "Relevance checks by outcome",
    labelnames=("outcome",),
)

PIPELINE_PAGES_TOTAL: Final[Counter] = Counter(
    "amazon_pipeline_pages_total",
    "Pages leaving the extraction pipeline, by terminal state",
    labelnames=("state",),
)

EXTRACTED_RESULTS_TOTAL: Final[Counter] = Counter(
    "amazon_extracted_results_total",
    "Non-empty result rows produced by extractors",
    labelnames=("extractor",),
)

NULL_FIELD_REPORTS_TOTAL: Final[Counter] = Counter(
    "amazon_null_field_reports_total",
    "Product rows reported for missing required fields",
)

LINKS_ENQUEUED_TOTAL: Final[Counter] = Counter(
    "amazon_links_enqueued_total",
    "Hyperlinks offered to frontier queues",
    labelnames=("tier", "mode", "accepted"),
)

# One counter per primary portal label; a miss means the listing layout changed
# and the secondary page is no longer reachable.
NO_SECONDARY_ZGBS_TOTAL: Final[Counter] = Counter(
    "amazon_no_secondary_zgbs_total",
    "Primary best-seller pages without a secondary listing link",
)
NO_SECONDARY_MOST_WISHED_FOR_TOTAL: Final[Counter] = Counter(
    "amazon_no_secondary_most_wished_for_total",
    "Primary most-wished-for pages without a secondary listing link",
)
NO_SECONDARY_NEW_RELEASES_TOTAL: Final[Counter] = Counter(
    "amazon_no_secondary_new_releases_total",
    "Primary new-release pages without a secondary listing link",
)

SECONDARY_PORTAL_MISS_COUNTERS: Final[dict[str, Counter]] = {
    "zgbs": NO_SECONDARY_ZGBS_TOTAL,
    "most-wished-for": NO_SECONDARY_MOST_WISHED_FOR_TOTAL,
    "new-releases": NO_SECONDARY_NEW_RELEASES_TOTAL,
}

PAGE_SIGNALS_INFO: Final[Info] = Info(
    "amazon_page_signals",
    "Last observed display language and delivery district",
)

_EXPORTER_LOCK = threading.Lock()
_EXPORTER_STARTED = False


def ensure_metrics_exporter(port: int) -> None:
    """Start Prometheus HTTP exporter once per process."""

    global _EXPORTER_STARTED
    with _EXPORTER_LOCK:
        if _EXPORTER_STARTED:
            return

        try:
            start_http_server(port)
        except OSError as exc:
            logger.error(
                "metrics_exporter_start_failed",
                port=port,
                error=str(exc),
            )
            raise

        _EXPORTER_STARTED = True
        logger.info("metrics_exporter_started", port=port)


__all__ = [
    "EXTRACTED_RESULTS_TOTAL",
    "LINKS_ENQUEUED_TOTAL",
    "NO_SECONDARY_MOST_WISHED_FOR_TOTAL",
    "NO_SECONDARY_NEW_RELEASES_TOTAL",
    "NO_SECONDARY_ZGBS_TOTAL",
    "NULL_FIELD_REPORTS_TOTAL",
    "PAGE_SIGNALS_INFO",
    "PIPELINE_PAGES_TOTAL",
    "RELEVANCE_CHECKS_TOTAL",
    "SECONDARY_PORTAL_MISS_COUNTERS",
    "ensure_metrics_exporter",
]
