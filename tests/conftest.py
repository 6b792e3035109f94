"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from prometheus_client import REGISTRY

from src.domain.models import FetchedPage, ResultRow
from src.domain.protocols import DocumentProtocol, ExtractorProtocol
from src.services.queue_pool import QueuePool


class FakeDocument(DocumentProtocol):
    """Selector-keyed stand-in for a parsed page."""

    def __init__(
        self,
        *,
        texts: Mapping[str, str] | None = None,
        attrs: Mapping[tuple[str, str], str] | None = None,
        hrefs: Mapping[str, list[str]] | None = None,
    ) -> None:
        self.texts = dict(texts or {})
        self.attrs = dict(attrs or {})
        self.hrefs = dict(hrefs or {})

    def select_first_text(self, selector: str) -> str | None:
        return self.texts.get(selector)

    def select_first_attr(self, selector: str, attr: str) -> str | None:
        return self.attrs.get((selector, attr))

    def select_hrefs(self, selector: str) -> list[str]:
        return list(self.hrefs.get(selector, []))


class StaticExtractor(ExtractorProtocol):
    """Extractor returning a fixed row."""

    def __init__(self, row: ResultRow | None, *, name: str = "amazon", is_root: bool = True):
        self.row = row
        self.name = name
        self.is_root = is_root
        self.calls = 0

    def extract(self, page: FetchedPage, document: DocumentProtocol) -> ResultRow | None:
        self.calls += 1
        return self.row


def sample_value(name: str, labels: dict[str, str] | None = None) -> float:
    """Current value of a prometheus sample, 0 when never observed."""
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture
def pool() -> QueuePool:
    """Fresh queue pool, isolated from the process-wide one."""
    return QueuePool()


@pytest.fixture
def empty_document() -> FakeDocument:
    return FakeDocument()


@pytest.fixture
def product_row() -> dict[str, Any]:
    """Complete product row from the root extractor."""
    return {
        "asin": "B08N5WRWNW",
        "title": "Echo Dot (4th Gen)",
        "price": "49.99",
        "soldby": "Amazon.com",
        "shipsfrom": "Amazon.com",
        "reviewsurl": "/product-reviews/B08N5WRWNW",
    }


@pytest.fixture
def product_page() -> FetchedPage:
    return FetchedPage(
        id=1200,
        url="https://www.amazon.com/dp/B08N5WRWNW",
        label="asin",
        args="-label asin",
        load_status="OK",
    )
