"""Hyperlink collection after extraction.

Routes the follow-up urls of a classified page into frontier tiers:

* catalogue listings change over time, so their secondary pages go to a
  reentrant high-priority queue and are revisited every period;
* detail and review pages only need one fetch before they are processed, so
  they go to non-reentrant queues.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Final
from urllib.parse import urljoin, urlsplit, urlunsplit

from src.config.logging_config import get_logger
from src.domain.extraction_constants import REVIEWS_URL_FIELD
from src.domain.models import FetchedPage, Hyperlink, ResultRow
from src.domain.page_traits import PageKind, PageTraits
from src.domain.priority import Priority13
from src.domain.protocols import DocumentProtocol
from src.domain.task_schedule import ASIN, BEST_SELLERS, REVIEW
from src.observability.metrics import SECONDARY_PORTAL_MISS_COUNTERS
from src.ports.url_queue import ReentrancyMode
from src.services.load_arguments import load_args_for_label
from src.services.page_traits_detector import extract_asin, is_review_page
from src.services.queue_pool import QueuePool, QueueTier

logger = get_logger(__name__)

BEST_SELLER_ITEM_SELECTOR: Final[str] = (
    "#gridItemRoot a[href*='/dp/'], #zg-ordered-list a[href*='/dp/']"
)
"""Product anchors of a ranked best-seller list."""

PORTAL_NEXT_PAGE_SELECTOR: Final[str] = (
    "ul.a-pagination li.a-last a, .zg-pagination li.a-last a"
)
"""Link to the second page of a catalogue listing."""

REVIEW_PAGINATION_SELECTOR: Final[str] = (
    "#cm_cr-pagination_bar a[href*='pageNumber='], "
    "#cm_cr-pagination_bar li.a-last a"
)
"""All pagination anchors of a review listing."""

REVIEW_NEXT_PAGE_SELECTOR: Final[str] = (
    "#cm_cr-pagination_bar li.a-last a, ul.a-pagination li.a-last a"
)
"""Next-page anchor of a review listing."""

PORTAL_TIER: Final[Priority13] = Priority13.HIGHER3

LinkHandler = Callable[[FetchedPage, DocumentProtocol, ResultRow, PageTraits, bool], None]


def _strip_fragment(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))


def _unique(urls: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique_urls: list[str] = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            unique_urls.append(url)
    return unique_urls


def detail_url(page_url: str, asin: str) -> str:
    """Canonical product url on the page's storefront."""
    parts = urlsplit(page_url)
    return f"{parts.scheme}://{parts.netloc}/dp/{asin}"


class AmazonLinkCollector:
    """Decides which follow-up urls of a page to queue, and where."""

    def __init__(
        self,
        pool: QueuePool,
        *,
        portal_tier: Priority13 = PORTAL_TIER,
        asin_tier: Priority13 = ASIN.priority,
        review_tier: Priority13 = REVIEW.priority,
    ) -> None:
        self._portal_tier = pool.tier_for(portal_tier)
        self._asin_tier = pool.tier_for(asin_tier)
        self._review_tier = pool.tier_for(review_tier)
        self._handlers: dict[PageKind, LinkHandler] = {
            PageKind.LABELED_PORTAL: self._on_labeled_portal,
            PageKind.ITEM: self._on_item,
            PageKind.PRIMARY_REVIEW: self._on_primary_review,
            PageKind.SECONDARY_REVIEW: self._on_secondary_review,
            PageKind.OTHER: self._on_other,
        }

    @property
    def review_tier(self) -> QueueTier:
        return self._review_tier

    def collect(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        *,
        asin_extractor: bool,
    ) -> None:
        """Queue follow-up links of a classified page. Exactly one handler runs."""
        self._handlers[traits.kind](page, document, row, traits, asin_extractor)

    # Dispatch handlers -------------------------------------------------

    def _on_labeled_portal(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        asin_extractor: bool,
    ) -> None:
        label = traits.portal_label or ""
        if label == BEST_SELLERS.label:
            self.collect_asin_links_from_best_seller(page, document)

        hyperlink = self.collect_secondary_links_from_labeled_portal(label, page, document)
        if traits.is_primary_portal and hyperlink is None:
            counter = SECONDARY_PORTAL_MISS_COUNTERS.get(label)
            if counter is not None:
                counter.inc()
            logger.debug("secondary_portal_link_missing", label=label, url=page.url)

    def _on_item(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        asin_extractor: bool,
    ) -> None:
        if asin_extractor:
            self.collect_review_links_from_product_page(page, row)

    def _on_primary_review(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        asin_extractor: bool,
    ) -> None:
        self.collect_secondary_review_links(page, document)

    def _on_secondary_review(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        asin_extractor: bool,
    ) -> None:
        self.collect_secondary_review_links_from_pagination(page, document)

    def _on_other(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        asin_extractor: bool,
    ) -> None:
        return None

    # Collectors --------------------------------------------------------

    def collect_asin_links_from_best_seller(
        self, page: FetchedPage, document: DocumentProtocol
    ) -> list[Hyperlink]:
        """Queue the product pages ranked on a best-seller list."""
        asins = (extract_asin(href) for href in document.select_hrefs(BEST_SELLER_ITEM_SELECTOR))
        urls = _unique(detail_url(page.url, asin) for asin in asins if asin)
        return self._enqueue_all(
            self._asin_tier, ReentrancyMode.NON_REENTRANT, urls, ASIN.label, page
        )

    def collect_secondary_links_from_labeled_portal(
        self, label: str, page: FetchedPage, document: DocumentProtocol
    ) -> Hyperlink | None:
        """Queue the secondary listing page of a portal, if the page links one."""
        hrefs = document.select_hrefs(PORTAL_NEXT_PAGE_SELECTOR)
        if not hrefs:
            return None

        link = Hyperlink(
            url=_strip_fragment(hrefs[0]),
            label=label,
            referrer=page.url,
            args=load_args_for_label(label),
        )
        self._portal_tier.enqueue(link, ReentrancyMode.REENTRANT)
        logger.debug("secondary_portal_link_collected", label=label, url=link.url)
        return link

    def collect_review_links_from_product_page(
        self, page: FetchedPage, row: ResultRow
    ) -> list[Hyperlink]:
        """Queue the review listing referenced by a product row."""
        raw = row.get(REVIEWS_URL_FIELD)
        if not isinstance(raw, str) or not raw.strip():
            return []

        url = _strip_fragment(urljoin(page.url, raw.strip()))
        if not is_review_page(url):
            logger.debug("review_url_unrecognized", url=url)
            return []

        return self._enqueue_all(
            self._review_tier, ReentrancyMode.NON_REENTRANT, [url], REVIEW.label, page
        )

    def collect_secondary_review_links(
        self, page: FetchedPage, document: DocumentProtocol
    ) -> list[Hyperlink]:
        """Queue the paginated review pages linked from a primary review page."""
        urls = _unique(
            _strip_fragment(href)
            for href in document.select_hrefs(REVIEW_PAGINATION_SELECTOR)
            if is_review_page(href)
        )
        return self._enqueue_all(
            self._review_tier, ReentrancyMode.NON_REENTRANT, urls, REVIEW.label, page
        )

    def collect_secondary_review_links_from_pagination(
        self, page: FetchedPage, document: DocumentProtocol
    ) -> list[Hyperlink]:
        """Queue the next review page linked from a secondary review page."""
        urls = [
            _strip_fragment(href)
            for href in document.select_hrefs(REVIEW_NEXT_PAGE_SELECTOR)[:1]
            if is_review_page(href)
        ]
        return self._enqueue_all(
            self._review_tier, ReentrancyMode.NON_REENTRANT, urls, REVIEW.label, page
        )

    def _enqueue_all(
        self,
        tier: QueueTier,
        mode: ReentrancyMode,
        urls: list[str],
        label: str,
        page: FetchedPage,
    ) -> list[Hyperlink]:
        args = load_args_for_label(label)
        accepted: list[Hyperlink] = []
        for url in urls:
            link = Hyperlink(url=url, label=label, referrer=page.url, args=args)
            if tier.enqueue(link, mode):
                accepted.append(link)

        if urls:
            logger.debug(
                "links_collected",
                tier=tier.name,
                mode=mode.value,
                label=label,
                offered=len(urls),
                accepted=len(accepted),
            )
        return accepted


__all__ = ["AmazonLinkCollector", "detail_url"]
