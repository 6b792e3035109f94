"""Last-observed page signals exposed for operators."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from prometheus_client import Info

from src.observability.metrics import PAGE_SIGNALS_INFO


@dataclass(frozen=True, slots=True)
class PageSignals:
    """Display language and delivery district seen on a page."""

    lang: str = ""
    district: str = ""


class PageSignalRegister:
    """Holds the most recent page signals.

    Concurrent pages overwrite each other: the last update wins. Values are a
    visibility aid for checking that the crawler browses with the expected
    language and delivery address, nothing reads them for decisions.
    """

    def __init__(self, info: Info | None = PAGE_SIGNALS_INFO) -> None:
        self._lock = threading.Lock()
        self._signals = PageSignals()
        self._info = info

    def update(self, *, lang: str, district: str) -> None:
        signals = PageSignals(lang=lang, district=district)
        with self._lock:
            self._signals = signals
            if self._info is not None:
                self._info.info({"lang": lang, "district": district})

    def snapshot(self) -> PageSignals:
        with self._lock:
            return self._signals

    @property
    def lang(self) -> str:
        return self.snapshot().lang

    @property
    def district(self) -> str:
        return self.snapshot().district


__all__ = ["PageSignalRegister", "PageSignals"]
