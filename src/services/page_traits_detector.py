"""Page trait detection for Amazon urls.

Classifies a page from its url shape, consulting the parsed document only when
the url alone is ambiguous. Unmatched urls are classified as other; nothing
here raises or performs I/O.
"""

import re
from typing import Final
from urllib.parse import parse_qs, urlsplit

from src.domain.page_traits import OTHER_TRAITS, PageKind, PageTraits
from src.domain.protocols import DocumentProtocol

AMAZON_HOST_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:[a-z0-9-]+\.)*amazon\."
    r"(?:com|ca|cn|de|es|fr|in|it|nl|pl|se|sg|ae|sa|eg|co\.uk|co\.jp|com\.au|com\.br|com\.mx|com\.tr|com\.be)$"
)
"""Hostnames of Amazon storefronts."""

ASIN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"/(?:dp|gp/product|gp/aw/d|product-reviews)/([A-Z0-9]{10})(?:[/?]|$)"
)
"""Pattern capturing the ASIN from detail and review urls."""

PRODUCT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"/(?:dp|gp/product|gp/aw/d)/[A-Z0-9]{10}(?:[/?]|$)"
)
"""Pattern to match product detail pages (e.g., /Some-Title/dp/B08N5WRWNW)."""

REVIEW_PATTERN: Final[re.Pattern[str]] = re.compile(r"/product-reviews/[A-Z0-9]{10}(?:[/?]|$)")
"""Pattern to match review listing pages of a product."""

PORTAL_LABEL_PATTERNS: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"/(?:zgbs|gp/bestsellers)(?:/|$)"), "zgbs"),
    (re.compile(r"/(?:gp/)?new-releases(?:/|$)"), "new-releases"),
    (re.compile(r"/(?:gp/)?most-wished-for(?:/|$)"), "most-wished-for"),
    (re.compile(r"/(?:gp/)?movers-and-shakers(?:/|$)"), "movers-and-shakers"),
)
"""Catalogue listing paths and the portal label each one carries."""

SELECTED_REVIEW_PAGE_SELECTOR: Final[str] = (
    "#cm_cr-pagination_bar li.a-selected, ul.a-pagination li.a-selected"
)


def is_target_site(url: str) -> bool:
    """Check whether the url belongs to an Amazon storefront.

    Example:
        >>> is_target_site("https://www.amazon.com/dp/B08N5WRWNW")
        True
        >>> is_target_site("https://www.example.com/dp/B08N5WRWNW")
        False
    """
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"}:
        return False
    host = (parts.hostname or "").lower()
    return bool(AMAZON_HOST_PATTERN.match(host))


def get_label_of_portal(url: str) -> str | None:
    """Portal label carried by a catalogue listing url, if any.

    Example:
        >>> get_label_of_portal("https://www.amazon.com/Best-Sellers-Video-Games/zgbs/videogames")
        'zgbs'
    """
    path = urlsplit(url).path
    for pattern, label in PORTAL_LABEL_PATTERNS:
        if pattern.search(path):
            return label
    return None


def is_labeled_portal_page(url: str) -> bool:
    return get_label_of_portal(url) is not None


def is_primary_labeled_portal_page(url: str) -> bool:
    """A listing entry page: portal url without paging or filter parameters.

    Primary portal urls come from seed lists; secondary pages are reached by
    following the listing pagination and always carry a query string.
    """
    return is_labeled_portal_page(url) and "?" not in url


def is_product_page(url: str) -> bool:
    return bool(PRODUCT_PATTERN.search(urlsplit(url).path))


def is_review_page(url: str) -> bool:
    return bool(REVIEW_PATTERN.search(urlsplit(url).path))


def extract_asin(url: str) -> str | None:
    match = ASIN_PATTERN.search(urlsplit(url).path)
    return match.group(1) if match else None


def review_page_number(url: str, document: DocumentProtocol | None = None) -> int:
    """Page number of a review listing, 1 when unknown."""
    values = parse_qs(urlsplit(url).query).get("pageNumber")
    if values:
        try:
            return max(int(values[0]), 1)
        except ValueError:
            return 1

    if document is not None:
        selected = document.select_first_text(SELECTED_REVIEW_PAGE_SELECTOR)
        if selected and selected.strip().isdigit():
            return max(int(selected.strip()), 1)

    return 1


def detect_traits(url: str, document: DocumentProtocol | None = None) -> PageTraits:
    """Classify a page; the first matching rule wins.

    Order: labeled portal, item, primary review, secondary review, other.
    """
    label = get_label_of_portal(url)
    if label is not None:
        return PageTraits.portal(label, primary=is_primary_labeled_portal_page(url))

    if is_product_page(url):
        return PageTraits.of(PageKind.ITEM)

    if is_review_page(url):
        if review_page_number(url, document) <= 1:
            return PageTraits.of(PageKind.PRIMARY_REVIEW)
        return PageTraits.of(PageKind.SECONDARY_REVIEW)

    return OTHER_TRAITS


__all__ = [
    "AMAZON_HOST_PATTERN",
    "detect_traits",
    "extract_asin",
    "get_label_of_portal",
    "is_labeled_portal_page",
    "is_primary_labeled_portal_page",
    "is_product_page",
    "is_review_page",
    "is_target_site",
    "review_page_number",
]
