"""Relevance gate run before any extraction."""

from __future__ import annotations

import re
from collections.abc import Callable

from src.config.logging_config import get_logger
from src.domain.extraction_constants import URL_FILTER_MISMATCH_CODE
from src.domain.models import FetchedPage
from src.domain.protocols import BaseRelevanceCheck
from src.domain.relevance import NOT_TARGET_SITE, RELEVANT, RelevanceState
from src.observability.metrics import RELEVANCE_CHECKS_TOTAL
from src.services.page_traits_detector import is_target_site

logger = get_logger(__name__)
irrelevance_logger = get_logger(f"{__name__}.irrelevance")


def url_filter_check(url_filter: str | re.Pattern[str]) -> BaseRelevanceCheck:
    """Base check accepting pages whose url matches the extractor's filter.

    Example:
        >>> check = url_filter_check(r"/dp/")
        >>> check(FetchedPage(id=1, url="https://www.amazon.com/dp/B08N5WRWNW")).is_ok
        True
    """
    pattern = re.compile(url_filter) if isinstance(url_filter, str) else url_filter

    def _check(page: FetchedPage) -> RelevanceState:
        if pattern.search(page.url):
            return RELEVANT
        return RelevanceState(URL_FILTER_MISMATCH_CODE, "url not match")

    return _check


def accept_all(page: FetchedPage) -> RelevanceState:
    return RELEVANT


class RelevanceGate:
    """Decides whether a fetched page should be extracted.

    The domain check runs first and short-circuits: pages outside the target
    site never reach the base check. Irrelevance is reported through the
    returned state, never through exceptions.
    """

    def __init__(
        self,
        base_check: BaseRelevanceCheck = accept_all,
        *,
        extractor_name: str = "",
        site_check: Callable[[str], bool] = is_target_site,
    ) -> None:
        self._base_check = base_check
        self._extractor_name = extractor_name
        self._site_check = site_check

    def check(self, page: FetchedPage) -> RelevanceState:
        if not self._site_check(page.url):
            state = NOT_TARGET_SITE
            outcome = "not_target_site"
        else:
            state = self._base_check(page)
            outcome = "ok" if state.is_ok else "irrelevant"

        RELEVANCE_CHECKS_TOTAL.labels(outcome=outcome).inc()

        if state.should_log:
            irrelevance_logger.info(
                "irrelevant_page",
                reason=state.message,
                code=state.code,
                extractor=self._extractor_name,
                url=page.url,
                load_status=page.load_status,
                args=page.args,
            )

        return state


__all__ = ["RelevanceGate", "accept_all", "url_filter_check"]
