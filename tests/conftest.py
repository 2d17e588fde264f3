"""
Shared pytest fixtures for catalog scraper tests.

Provides temporary databases, catalog HTML builders, a fake Playwright page
and test configurations.
"""

import pytest
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import Mock
from playwright.sync_api import TimeoutError as PlaywrightTimeout

from src.config import ScraperConfig
from src.ingest.scrapers.pagination import LISTING_SIGNATURE_JS, LISTINGS_CHANGED_JS
from src.ingest.scrapers.scroll import SCROLL_HEIGHT_JS


# ─────────────────────────────────────────────────────────────────────
# Environment Fixtures
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test in its own directory (logs, metrics, results)."""
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture
def temp_db():
    """Create a temporary DuckDB path for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield str(Path(tmpdir) / "runs.duckdb")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ─────────────────────────────────────────────────────────────────────
# Catalog HTML Fixtures
# ─────────────────────────────────────────────────────────────────────

def make_card(listing_id="o-1001", title="HP EliteBook 840 G5", img="https://cdn.example.test/1001.jpg",
              price=("85 000", "DA"), tags=("Core i5", "16 GB", "SSD 512"),
              others=("Bon état", "il y a 2 heures"), with_card=True):
    """Render one listing container the way the catalog does."""
    id_attr = f' id="{listing_id}"' if listing_id is not None else ""
    if not with_card:
        return f'<div class="search-view-item"{id_attr}><div class="skeleton"></div></div>'

    img_html = f'<div class="o-announ-card-image"><img src="{img}"></div>' if img is not None else ""
    title_html = f'<h3 class="o-announ-card-title">  {title}  </h3>' if title is not None else ""
    price_html = (
        '<span class="price"><span>' + "".join(f"<div> {p} </div>" for p in price) + "</span></span>"
    )
    tags_html = (
        '<div class="col py-0 px-0 my-1">'
        + "".join(f'<span class="v-chip"> {t} </span>' for t in tags)
        + "</div>"
    )
    others_html = (
        '<div class="mb-1 d-flex flex-column flex-gap-1 line-height-1">'
        + "".join(f"<span>{o}</span>" for o in others)
        + "</div>"
    )
    return (
        f'<div class="search-view-item"{id_attr}>'
        f'<div class="v-card o-announ-card">{img_html}{title_html}{price_html}{tags_html}{others_html}</div>'
        f"</div>"
    )


def make_catalog_html(cards, total_pages=3):
    """Wrap cards in the catalog layout (listings live in the 4th lazy block)."""
    return (
        "<html><body><div class=\"search\">"
        "<div class=\"v-lazy\"></div><div class=\"v-lazy\"></div><div class=\"v-lazy\"></div>"
        f"<div class=\"v-lazy\">{''.join(cards)}</div>"
        "</div>"
        f"<div class=\"search-view-pagination\"><nav class=\"pagination\" length=\"{total_pages}\">"
        "<button class=\"v-pagination__next\">next</button></nav></div>"
        "</body></html>"
    )


@pytest.fixture
def catalog_html():
    """A catalog page with three well-formed cards."""
    return make_catalog_html([
        make_card("o-1001"),
        make_card("o-1002", title="Dell Latitude 5490", price=("62 000", "DA")),
        make_card("o-1003", title="Lenovo ThinkPad T480", tags=("Core i7",)),
    ])


# ─────────────────────────────────────────────────────────────────────
# Fake Browser Page
# ─────────────────────────────────────────────────────────────────────

class FakeLocator:
    def __init__(self, page, selector):
        self.page = page
        self.selector = selector

    def count(self):
        return 1 if self.page.has_next else 0

    @property
    def first(self):
        return self

    def click(self, timeout=None):
        self.page.clicks += 1
        if self.page.click_is_noop:
            return
        self.page.current += 1
        self.page.url = f"{self.page.start_url}&page={self.page.current + 1}"


class FakeCatalogPage:
    """
    Minimal stand-in for a Playwright sync Page.

    Serves one HTML document per catalog page; clicking "next" moves to the
    following document unless `click_is_noop` is set. Scroll height is fixed,
    so scrolling stops quickly.
    """

    def __init__(self, pages_html, total_pages="3", has_next=True, scroll_height=300,
                 next_selector=None, click_is_noop=False):
        self.pages_html = list(pages_html)
        self.total_pages = total_pages
        self.has_next = has_next
        self.click_is_noop = click_is_noop
        self.scroll_height = scroll_height
        self.next_selector = next_selector or ScraperConfig(category="automobiles").selectors.next_page_link
        self.current = 0
        self.clicks = 0
        self.start_url = None
        self.url = "about:blank"
        self.keyboard = Mock()

    def goto(self, url, timeout=None, **kwargs):
        self.start_url = url
        self.url = url

    def wait_for_selector(self, selector, timeout=None, **kwargs):
        if selector == self.next_selector and not self.has_next:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return Mock()

    def get_attribute(self, selector, name, timeout=None):
        return self.total_pages

    def evaluate(self, expression, arg=None):
        if expression == SCROLL_HEIGHT_JS:
            return self.scroll_height
        if expression == LISTING_SIGNATURE_JS:
            return self.listing_signature()
        return None

    def listing_signature(self):
        return ",".join(re.findall(r'class="search-view-item" id="([^"]*)"', self.content()))

    def wait_for_function(self, expression, arg=None, timeout=None, polling=None):
        if expression == LISTINGS_CHANGED_JS:
            now = self.listing_signature()
            if not now or now == arg["before"]:
                raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")
        return Mock()

    def wait_for_timeout(self, timeout):
        pass

    def wait_for_load_state(self, state=None, timeout=None):
        pass

    def content(self):
        return self.pages_html[min(self.current, len(self.pages_html) - 1)]

    def locator(self, selector):
        return FakeLocator(self, selector)


@pytest.fixture
def fake_session_factory():
    """Build a browser_session replacement that yields the given page and counts closes."""
    def factory(page):
        calls = {"opened": 0, "closed": 0}

        @contextmanager
        def session():
            calls["opened"] += 1
            try:
                yield page
            finally:
                calls["closed"] += 1

        return session, calls

    return factory


# ─────────────────────────────────────────────────────────────────────
# Configuration Fixtures
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_config(temp_dir):
    """Scraper configuration for the example catalog."""
    return ScraperConfig(
        base_url="https://example.test",
        category="cat",
        categories=("cat",),
        query_filter="?hasPrice=true",
        page_limit=2,
        download_images=False,
        output_dir=str(temp_dir / "results"),
        headless=True,
        scroll_delay_ms=0,
    )


@pytest.fixture
def sample_raw_config():
    """Raw catalogs.yaml content."""
    return {
        "defaults": {
            "base_url": "https://www.ouedkniss.com",
            "query_filter": "?hasPrice=true&hasPictures=true",
            "page_limit": 1,
            "download_images": True,
            "output_dir": "results",
        },
        "catalogs": {
            "laptops": {"category": "informatique-ordinateur-portable", "page_limit": 2},
            "telephones": {"category": "telephones"},
        },
    }


# ─────────────────────────────────────────────────────────────────────
# Metrics Fixtures
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def metrics_collector(temp_db):
    """Create a fresh MetricsCollector for testing."""
    from src.observability.metrics import MetricsCollector
    return MetricsCollector(db_path=temp_db)


# ─────────────────────────────────────────────────────────────────────
# Cleanup
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_metrics_singleton():
    """Reset global metrics collector singleton between tests."""
    import src.observability.metrics as metrics_module
    metrics_module._metrics_instance = None
    yield
    metrics_module._metrics_instance = None
