"""
Catalog traversal.

Drives one browser page through a paginated, infinite-scroll catalog:

    Init      goto start URL, read the total page count
    Paging(i) scroll to exhaustion, extract, accumulate, go to next page
    Done      hand the accumulated listings to the persister
    Failed    any step error ends the run; nothing is persisted

Pages visited = min(page_limit, total_pages). No step is retried.
"""

from typing import List, Optional
from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeout

from src.config import ScraperConfig
from src.exceptions import NavigationTimeout
from src.schemas.listing import ListingRecord
from src.observability.logging_config import log_banner
from src.observability.metrics import MetricsCollector
from src.storage.local import LocalPersister, PersistResult
from .base import BaseScraper, RunState
from .extractor import ContentExtractor
from .pagination import PaginationNavigator
from .scroll import InfiniteScrollDriver


class CatalogScraper(BaseScraper):
    def __init__(
        self,
        config: ScraperConfig,
        persister=None,
        metrics: Optional[MetricsCollector] = None,
        verbose: bool = False,
    ):
        super().__init__(config, metrics=metrics, verbose=verbose)
        self.persister = persister or LocalPersister(config)
        self.extractor = ContentExtractor(config.selectors)
        self.scroller = InfiniteScrollDriver(config)
        self.navigator = PaginationNavigator(config)

    def open_catalog(self, page: Page) -> int:
        """Navigate to the start URL and return the total page count."""
        url = self.config.start_url
        try:
            page.goto(url, timeout=self.config.navigation_timeout_ms)
        except PlaywrightTimeout as e:
            raise NavigationTimeout(url, self.config.navigation_timeout_ms, url) from e
        return self.navigator.read_total_pages(page)

    def scrape_page(self, page: Page, page_index: int) -> List[ListingRecord]:
        self.scroller.exhaust_scroll(page, page_index)
        logger.info(f"Scraping content of page {page_index}: {page.url}")

        batch = self.extractor.extract(page)
        logger.info(f"Scrap results: {len(batch)}")
        return batch

    def traverse(self, page: Page, state: RunState) -> List[ListingRecord]:
        total_pages = self.open_catalog(page)
        state.begin_paging(total_pages)
        state.current_url = page.url

        nb_pages = min(self.config.page_limit, total_pages)
        log_banner(
            f"URL: {self.config.start_url}",
            f"Pages available: {total_pages}",
            f"Pages to scrape: {nb_pages}",
        )

        for i in range(1, nb_pages + 1):
            state.page_index = i
            state.current_url = page.url

            with self.metrics.track_page(i, url=page.url) as visit:
                batch = self.scrape_page(page, i)
                visit.products_count = len(batch)

            state.accumulate(batch)
            state.extraction_gaps += len(self.extractor.gaps)

            if i < nb_pages:
                self.navigator.go_to_next_page(page, i)
                state.navigations += 1

        log_banner(f"Total scraped products: {len(state.results)}")
        return state.results

    def save_results(self, records: List[ListingRecord]) -> PersistResult:
        return self.persister.save(records)
