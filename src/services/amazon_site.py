"""Amazon capabilities plugged into the extraction pipeline."""

from __future__ import annotations

from src.domain.models import FetchedPage, ResultRow
from src.domain.page_traits import PageTraits
from src.domain.protocols import DocumentProtocol, SiteCapabilities
from src.services import page_traits_detector
from src.services.field_requirements import FieldRequirementPolicy, check_field_requirement
from src.services.link_collector import AmazonLinkCollector


class AmazonSite(SiteCapabilities):
    """Classification, link routing and row checks for Amazon storefronts."""

    def __init__(
        self,
        link_collector: AmazonLinkCollector,
        field_policy: FieldRequirementPolicy | None = None,
    ) -> None:
        self._link_collector = link_collector
        self._field_policy = field_policy or FieldRequirementPolicy()

    def is_target_site(self, url: str) -> bool:
        return page_traits_detector.is_target_site(url)

    def is_detail_page(self, url: str) -> bool:
        return page_traits_detector.is_product_page(url)

    def classify(self, url: str, document: DocumentProtocol | None = None) -> PageTraits:
        return page_traits_detector.detect_traits(url, document)

    def collect_links(
        self,
        page: FetchedPage,
        document: DocumentProtocol,
        row: ResultRow,
        traits: PageTraits,
        *,
        asin_extractor: bool,
    ) -> None:
        self._link_collector.collect(
            page, document, row, traits, asin_extractor=asin_extractor
        )

    def check_fields(self, url: str, row: ResultRow) -> list[str] | None:
        return check_field_requirement(row, self._field_policy)


__all__ = ["AmazonSite"]
