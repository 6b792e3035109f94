from __future__ import annotations

import pytest

from src.domain.page_traits import PageKind
from src.domain.priority import Priority13
from src.services.page_traits_detector import (
    SELECTED_REVIEW_PAGE_SELECTOR,
    detect_traits,
    extract_asin,
    get_label_of_portal,
    is_primary_labeled_portal_page,
    is_product_page,
    is_target_site,
)
from tests.conftest import FakeDocument


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://www.amazon.com/dp/B08N5WRWNW", True),
        ("https://amazon.co.uk/gp/product/B08N5WRWNW", True),
        ("https://smile.amazon.de/zgbs/electronics", True),
        ("https://www.example.com/dp/B08N5WRWNW", False),
        ("https://amazon.com.evil.example/dp/B08N5WRWNW", False),
        ("ftp://www.amazon.com/dp/B08N5WRWNW", False),
        ("not a url", False),
    ],
)
def test_is_target_site(url: str, expected: bool) -> None:
    assert is_target_site(url) is expected


@pytest.mark.parametrize(
    ("url", "label"),
    [
        ("https://www.amazon.com/Best-Sellers/zgbs", "zgbs"),
        ("https://www.amazon.com/Best-Sellers-Electronics/zgbs/electronics", "zgbs"),
        ("https://www.amazon.com/gp/bestsellers/books", "zgbs"),
        ("https://www.amazon.com/gp/new-releases/electronics", "new-releases"),
        ("https://www.amazon.com/gp/most-wished-for", "most-wished-for"),
        ("https://www.amazon.com/gp/movers-and-shakers/toys", "movers-and-shakers"),
        ("https://www.amazon.com/dp/B08N5WRWNW", None),
    ],
)
def test_get_label_of_portal(url: str, label: str | None) -> None:
    assert get_label_of_portal(url) == label


def test_primary_portal_has_no_query_string() -> None:
    assert is_primary_labeled_portal_page("https://www.amazon.com/zgbs/electronics")
    assert not is_primary_labeled_portal_page(
        "https://www.amazon.com/zgbs/electronics?pg=2"
    )
    assert not is_primary_labeled_portal_page("https://www.amazon.com/dp/B08N5WRWNW")


def test_product_page_and_asin() -> None:
    url = "https://www.amazon.com/Echo-Dot/dp/B08N5WRWNW/ref=sr_1_1"

    assert is_product_page(url)
    assert extract_asin(url) == "B08N5WRWNW"
    assert extract_asin("https://www.amazon.com/gp/help") is None


@pytest.mark.parametrize(
    ("url", "kind"),
    [
        ("https://www.amazon.com/zgbs/electronics", PageKind.LABELED_PORTAL),
        ("https://www.amazon.com/dp/B08N5WRWNW", PageKind.ITEM),
        ("https://www.amazon.com/Best-Sellers-Cookbook-Recipes/dp/B08N5WRWNW", PageKind.ITEM),
        ("https://www.amazon.com/Best-Sellers-Electronics/zgbs/electronics", PageKind.LABELED_PORTAL),
        ("https://www.amazon.com/product-reviews/B08N5WRWNW", PageKind.PRIMARY_REVIEW),
        (
            "https://www.amazon.com/product-reviews/B08N5WRWNW?pageNumber=1",
            PageKind.PRIMARY_REVIEW,
        ),
        (
            "https://www.amazon.com/product-reviews/B08N5WRWNW?pageNumber=3",
            PageKind.SECONDARY_REVIEW,
        ),
        ("https://www.amazon.com/gp/help/customer", PageKind.OTHER),
        ("https://www.example.com/", PageKind.OTHER),
        ("", PageKind.OTHER),
    ],
)
def test_detect_traits_exactly_one_kind(url: str, kind: PageKind) -> None:
    traits = detect_traits(url)

    assert traits.kind is kind
    flags = [
        traits.is_labeled_portal,
        traits.is_item,
        traits.is_primary_review,
        traits.is_secondary_review,
        traits.is_other,
    ]
    assert flags.count(True) == 1


def test_portal_traits_carry_label_and_primacy() -> None:
    primary = detect_traits("https://www.amazon.com/gp/new-releases")
    secondary = detect_traits("https://www.amazon.com/gp/new-releases?pg=2")

    assert primary.portal_label == "new-releases"
    assert primary.is_primary_portal
    assert secondary.portal_label == "new-releases"
    assert not secondary.is_primary_portal


def test_review_page_number_falls_back_to_selected_pagination() -> None:
    url = "https://www.amazon.com/product-reviews/B08N5WRWNW"
    document = FakeDocument(texts={SELECTED_REVIEW_PAGE_SELECTOR: " 4 "})

    assert detect_traits(url, document).kind is PageKind.SECONDARY_REVIEW
    assert detect_traits(url, FakeDocument()).kind is PageKind.PRIMARY_REVIEW


def test_priority_scale_ordering() -> None:
    assert Priority13.HIGHER3.is_higher_than(Priority13.NORMAL)
    assert Priority13.LOWER2.is_higher_than(Priority13.LOWER3)
    assert not Priority13.LOWEST.is_higher_than(Priority13.HIGHEST)
    assert Priority13.from_tier_name("lower2") is Priority13.LOWER2
    assert len({priority.tier_name for priority in Priority13}) == 13
