"""Helpers for binding page context to log lines."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from src.config.logging_config import bind_context, unbind_context
from src.domain.models import FetchedPage

PAGE_ID_KEY = "page_id"
PAGE_URL_KEY = "url"


@contextmanager
def page_scope(page: FetchedPage) -> Iterator[FetchedPage]:
    """Bind the page id and url for the lifetime of the context."""

    bind_context(**{PAGE_ID_KEY: page.id, PAGE_URL_KEY: page.url})
    try:
        yield page
    finally:
        unbind_context(PAGE_ID_KEY, PAGE_URL_KEY)


__all__ = ["PAGE_ID_KEY", "PAGE_URL_KEY", "page_scope"]
