from __future__ import annotations

from src.adapters.soup_document import SoupDocument
from src.services.link_collector import BEST_SELLER_ITEM_SELECTOR, PORTAL_NEXT_PAGE_SELECTOR
from src.use_cases.extraction_pipeline import DISTRICT_SELECTOR, LANG_FLAG_SELECTOR

HTML = """
<html><body>
  <div id="nav-tools"><span class="icp-nav-flag icp-nav-flag-us"></span></div>
  <div id="glow-ingress-block">
    <span>Deliver to</span> <span>Seattle 98101</span>
  </div>
  <div id="gridItemRoot">
    <a href="/Echo-Dot/dp/B08N5WRWNW/ref=zg_bs_1">Echo Dot</a>
    <a href="https://www.amazon.com/Kindle/dp/B07978J597">Kindle</a>
    <a href="/gp/help">Help</a>
  </div>
  <ul class="a-pagination">
    <li class="a-selected"><a href="?pg=1">1</a></li>
    <li class="a-last"><a href="/zgbs/electronics?pg=2">Next page</a></li>
  </ul>
</body></html>
"""

BASE_URL = "https://www.amazon.com/zgbs/electronics"


def test_select_first_attr_joins_class_list() -> None:
    document = SoupDocument(HTML, BASE_URL)

    assert document.select_first_attr(LANG_FLAG_SELECTOR, "class") == (
        "icp-nav-flag icp-nav-flag-us"
    )
    assert document.select_first_attr("#missing", "class") is None
    assert document.select_first_attr("#nav-tools", "data-x") is None


def test_select_first_text_normalizes_whitespace() -> None:
    document = SoupDocument(HTML, BASE_URL)

    assert document.select_first_text(DISTRICT_SELECTOR) == "Deliver to Seattle 98101"
    assert document.select_first_text("#missing") is None


def test_select_hrefs_are_absolute() -> None:
    document = SoupDocument(HTML, BASE_URL)

    assert document.select_hrefs(BEST_SELLER_ITEM_SELECTOR) == [
        "https://www.amazon.com/Echo-Dot/dp/B08N5WRWNW/ref=zg_bs_1",
        "https://www.amazon.com/Kindle/dp/B07978J597",
    ]
    assert document.select_hrefs(PORTAL_NEXT_PAGE_SELECTOR) == [
        "https://www.amazon.com/zgbs/electronics?pg=2"
    ]
