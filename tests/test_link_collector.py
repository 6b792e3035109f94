from __future__ import annotations

from typing import Any

import pytest
from structlog.testing import capture_logs

from src.domain.models import FetchedPage
from src.domain.page_traits import PageKind, PageTraits
from src.ports.url_queue import ReentrancyMode
from src.services.link_collector import (
    BEST_SELLER_ITEM_SELECTOR,
    PORTAL_NEXT_PAGE_SELECTOR,
    REVIEW_NEXT_PAGE_SELECTOR,
    REVIEW_PAGINATION_SELECTOR,
    AmazonLinkCollector,
    detail_url,
)
from src.services.page_traits_detector import detect_traits
from src.services.queue_pool import QueuePool
from tests.conftest import FakeDocument, sample_value

PORTAL_URL = "https://www.amazon.com/Best-Sellers-Electronics/zgbs/electronics"


def _page(url: str, page_id: int = 900) -> FetchedPage:
    return FetchedPage(id=page_id, url=url)


def _drain(pool: QueuePool, tier: str, mode: ReentrancyMode) -> list[str]:
    queue = pool.tier(tier).queue(mode)
    urls = []
    while (link := queue.poll()) is not None:
        urls.append(link.url)
    return urls


@pytest.fixture
def collector(pool: QueuePool) -> AmazonLinkCollector:
    return AmazonLinkCollector(pool)


def test_best_seller_portal_collects_once(
    collector: AmazonLinkCollector, pool: QueuePool, mocker
) -> None:
    spy = mocker.spy(collector, "collect_asin_links_from_best_seller")
    document = FakeDocument(
        hrefs={
            BEST_SELLER_ITEM_SELECTOR: [
                "https://www.amazon.com/Echo-Dot/dp/B08N5WRWNW/ref=zg_bs_1",
                "https://www.amazon.com/Echo-Dot/dp/B08N5WRWNW/ref=zg_bs_1_img",
                "https://www.amazon.com/Kindle/dp/B07978J597/ref=zg_bs_2",
            ],
            PORTAL_NEXT_PAGE_SELECTOR: [f"{PORTAL_URL}?pg=2#top"],
        }
    )

    collector.collect(
        _page(PORTAL_URL), document, {}, detect_traits(PORTAL_URL), asin_extractor=False
    )

    spy.assert_called_once()
    assert _drain(pool, "lower2", ReentrancyMode.NON_REENTRANT) == [
        "https://www.amazon.com/dp/B08N5WRWNW",
        "https://www.amazon.com/dp/B07978J597",
    ]
    assert _drain(pool, "higher3", ReentrancyMode.REENTRANT) == [f"{PORTAL_URL}?pg=2"]


def test_secondary_portal_link_carries_label_and_args(
    collector: AmazonLinkCollector, pool: QueuePool
) -> None:
    url = "https://www.amazon.com/gp/new-releases/electronics"
    document = FakeDocument(hrefs={PORTAL_NEXT_PAGE_SELECTOR: [f"{url}?pg=2"]})

    link = collector.collect_secondary_links_from_labeled_portal(
        "new-releases", _page(url), document
    )

    assert link is not None
    assert link.label == "new-releases"
    assert link.referrer == url
    assert link.args.startswith("-label new-releases -expires PT24H")
    assert len(pool.tier("lower2")) == 0


def test_non_best_seller_portal_skips_detail_links(
    collector: AmazonLinkCollector, pool: QueuePool, mocker
) -> None:
    spy = mocker.spy(collector, "collect_asin_links_from_best_seller")
    url = "https://www.amazon.com/gp/most-wished-for?pg=2"

    collector.collect(_page(url), FakeDocument(), {}, detect_traits(url), asin_extractor=False)

    spy.assert_not_called()


def test_item_page_enqueues_one_review_link(
    collector: AmazonLinkCollector, pool: QueuePool, product_row: dict[str, Any]
) -> None:
    url = "https://www.amazon.com/dp/B08N5WRWNW"

    collector.collect(_page(url), FakeDocument(), product_row, detect_traits(url), asin_extractor=True)

    assert _drain(pool, "lower3", ReentrancyMode.NON_REENTRANT) == [
        "https://www.amazon.com/product-reviews/B08N5WRWNW"
    ]
    assert len(pool.tier("higher3")) == 0
    assert len(pool) == 0


def test_item_page_without_asin_extractor_collects_nothing(
    collector: AmazonLinkCollector, pool: QueuePool, product_row: dict[str, Any]
) -> None:
    url = "https://www.amazon.com/dp/B08N5WRWNW"

    collector.collect(_page(url), FakeDocument(), product_row, detect_traits(url), asin_extractor=False)

    assert len(pool) == 0


@pytest.mark.parametrize("reviews_url", [None, "", "/gp/help/customer"])
def test_item_page_without_review_url(
    collector: AmazonLinkCollector, pool: QueuePool, reviews_url: str | None
) -> None:
    url = "https://www.amazon.com/dp/B08N5WRWNW"

    collector.collect(
        _page(url),
        FakeDocument(),
        {"asin": "B08N5WRWNW", "reviewsurl": reviews_url},
        detect_traits(url),
        asin_extractor=True,
    )

    assert len(pool) == 0


def test_primary_portal_without_secondary_link_counts_one_miss(
    collector: AmazonLinkCollector,
) -> None:
    before = {
        label: sample_value(f"amazon_no_secondary_{label.replace('-', '_')}_total")
        for label in ("zgbs", "most-wished-for", "new-releases")
    }

    with capture_logs() as logs:
        collector.collect(
            _page(PORTAL_URL), FakeDocument(), {}, detect_traits(PORTAL_URL), asin_extractor=False
        )

    after = {
        label: sample_value(f"amazon_no_secondary_{label.replace('-', '_')}_total")
        for label in before
    }
    assert after["zgbs"] == before["zgbs"] + 1
    assert after["most-wished-for"] == before["most-wished-for"]
    assert after["new-releases"] == before["new-releases"]
    misses = [entry for entry in logs if entry["event"] == "secondary_portal_link_missing"]
    assert [(entry["label"], entry["log_level"]) for entry in misses] == [("zgbs", "debug")]


def test_secondary_portal_without_link_counts_nothing(collector: AmazonLinkCollector) -> None:
    url = f"{PORTAL_URL}?pg=2"
    before = sample_value("amazon_no_secondary_zgbs_total")

    collector.collect(_page(url), FakeDocument(), {}, detect_traits(url), asin_extractor=False)

    assert sample_value("amazon_no_secondary_zgbs_total") == before


def test_primary_review_enqueues_pagination(
    collector: AmazonLinkCollector, pool: QueuePool
) -> None:
    url = "https://www.amazon.com/product-reviews/B08N5WRWNW"
    document = FakeDocument(
        hrefs={
            REVIEW_PAGINATION_SELECTOR: [
                f"{url}?pageNumber=2",
                f"{url}?pageNumber=3",
                f"{url}?pageNumber=2",
                "https://www.amazon.com/gp/help",
            ]
        }
    )

    collector.collect(_page(url), document, {}, detect_traits(url), asin_extractor=False)

    assert _drain(pool, "lower3", ReentrancyMode.NON_REENTRANT) == [
        f"{url}?pageNumber=2",
        f"{url}?pageNumber=3",
    ]


def test_secondary_review_enqueues_next_page_only(
    collector: AmazonLinkCollector, pool: QueuePool
) -> None:
    base = "https://www.amazon.com/product-reviews/B08N5WRWNW"
    url = f"{base}?pageNumber=2"
    document = FakeDocument(
        hrefs={REVIEW_NEXT_PAGE_SELECTOR: [f"{base}?pageNumber=3", f"{base}?pageNumber=4"]}
    )

    collector.collect(_page(url), document, {}, detect_traits(url), asin_extractor=False)

    assert _drain(pool, "lower3", ReentrancyMode.NON_REENTRANT) == [f"{base}?pageNumber=3"]


def test_other_page_collects_nothing(collector: AmazonLinkCollector, pool: QueuePool) -> None:
    collector.collect(
        _page("https://www.amazon.com/gp/help"),
        FakeDocument(hrefs={PORTAL_NEXT_PAGE_SELECTOR: ["https://www.amazon.com/x"]}),
        {},
        PageTraits.of(PageKind.OTHER),
        asin_extractor=True,
    )

    assert len(pool) == 0


def test_detail_url_keeps_storefront() -> None:
    assert detail_url("https://www.amazon.de/zgbs/x", "B08N5WRWNW") == (
        "https://www.amazon.de/dp/B08N5WRWNW"
    )
