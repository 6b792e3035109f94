from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from src.domain.models import FetchedPage
from src.domain.relevance import RELEVANT, RelevanceState
from src.services.relevance_gate import RelevanceGate, accept_all, url_filter_check
from tests.conftest import sample_value


def _page(url: str) -> FetchedPage:
    return FetchedPage(id=7, url=url, args="-label asin", load_status="OK")


def _irrelevant_logs(logs: list[dict]) -> list[dict]:
    return [entry for entry in logs if entry["event"] == "irrelevant_page"]


def test_non_target_site_short_circuits_base_check(mocker) -> None:
    base_check = mocker.Mock(return_value=RELEVANT)
    gate = RelevanceGate(base_check, extractor_name="amazon")

    with capture_logs() as logs:
        state = gate.check(_page("https://www.example.com/dp/B08N5WRWNW"))

    assert state.code == 1010
    assert state.message == "not amazon"
    base_check.assert_not_called()
    [entry] = _irrelevant_logs(logs)
    assert entry["code"] == 1010
    assert entry["extractor"] == "amazon"
    assert entry["load_status"] == "OK"
    assert entry["args"] == "-label asin"


def test_target_site_returns_base_check_state_unchanged(mocker) -> None:
    expected = RelevanceState(1200, "sold out")
    base_check = mocker.Mock(return_value=expected)
    gate = RelevanceGate(base_check)
    page = _page("https://www.amazon.com/dp/B08N5WRWNW")

    assert gate.check(page) is expected
    base_check.assert_called_once_with(page)


def test_default_base_check_accepts_target_site_pages() -> None:
    gate = RelevanceGate()

    assert gate.check(_page("https://www.amazon.com/gp/help")).is_ok
    assert accept_all(_page("https://www.amazon.com/")) is RELEVANT


def test_url_filter_check() -> None:
    check = url_filter_check(r"/dp/")

    assert check(_page("https://www.amazon.com/dp/B08N5WRWNW")).is_ok
    mismatch = check(_page("https://www.amazon.com/gp/help"))
    assert (mismatch.code, mismatch.message) == (60, "url not match")


@pytest.mark.parametrize(
    ("code", "logged"),
    [
        (60, False),
        (1601, False),
        (39, False),
        (40, True),
        (1200, True),
    ],
)
def test_irrelevance_logging_policy(code: int, logged: bool) -> None:
    gate = RelevanceGate(lambda page: RelevanceState(code, "irrelevant"))

    with capture_logs() as logs:
        state = gate.check(_page("https://www.amazon.com/dp/B08N5WRWNW"))

    assert state.code == code
    assert bool(_irrelevant_logs(logs)) is logged


def test_relevant_page_is_not_logged() -> None:
    with capture_logs() as logs:
        RelevanceGate().check(_page("https://www.amazon.com/dp/B08N5WRWNW"))

    assert _irrelevant_logs(logs) == []


def test_outcomes_are_counted() -> None:
    before = sample_value("amazon_relevance_checks_total", {"outcome": "not_target_site"})

    RelevanceGate().check(_page("https://www.example.com/"))

    after = sample_value("amazon_relevance_checks_total", {"outcome": "not_target_site"})
    assert after == before + 1
