"""BeautifulSoup-backed implementation of the document protocol."""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from src.domain.protocols import DocumentProtocol


class SoupDocument(DocumentProtocol):
    """Parsed HTML of one page, queried with CSS selectors (soupsieve)."""

    def __init__(self, html: str, base_url: str, parser: str = "html.parser") -> None:
        self._soup = BeautifulSoup(html, parser)
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        return self._base_url

    def _first(self, selector: str) -> Tag | None:
        return self._soup.select_one(selector)

    def select_first_text(self, selector: str) -> str | None:
        element = self._first(selector)
        if element is None:
            return None
        return element.get_text(" ", strip=True)

    def select_first_attr(self, selector: str, attr: str) -> str | None:
        element = self._first(selector)
        if element is None:
            return None
        value = element.get(attr)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def select_hrefs(self, selector: str) -> list[str]:
        hrefs: list[str] = []
        for element in self._soup.select(selector):
            href = element.get("href")
            if isinstance(href, str) and href.strip():
                hrefs.append(urljoin(self._base_url, href.strip()))
        return hrefs


__all__ = ["SoupDocument"]
