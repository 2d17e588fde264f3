"""
Base scraper class. Catalog scrapers inherit from this.

BaseScraper handles:
- Browser session lifecycle (one browser, one page, closed exactly once)
- Run state and run result
- Metrics and logging setup per run
- Top-level error handling

Subclasses implement:
- traverse(page, state) -> list of records for the whole run
- save_results(records) -> persistence summary
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional
from loguru import logger
from playwright.sync_api import Page, sync_playwright

from src.config import ScraperConfig
from src.exceptions import ScraperError
from src.schemas.listing import ListingRecord
from src.observability.metrics import MetricsCollector, get_metrics_collector
from src.observability.logging_config import setup_logging


class RunStatus(str, Enum):
    INIT = "init"
    PAGING = "paging"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunState:
    """Mutable state of one run. Lives only for the duration of run()."""
    status: RunStatus = RunStatus.INIT
    page_index: int = 0
    total_pages: int = 1
    current_url: Optional[str] = None
    results: List[ListingRecord] = field(default_factory=list)
    pages_visited: int = 0
    navigations: int = 0
    extraction_gaps: int = 0
    error: Optional[BaseException] = None

    def begin_paging(self, total_pages: int):
        self.total_pages = total_pages
        self.status = RunStatus.PAGING

    def accumulate(self, batch: List[ListingRecord]):
        self.results.extend(batch)
        self.pages_visited += 1

    def fail(self, error: BaseException):
        self.error = error
        self.status = RunStatus.FAILED


@dataclass
class RunResult:
    run_id: str
    status: RunStatus
    pages_visited: int
    navigations: int
    products_scraped: int
    error: Optional[BaseException] = None
    output_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


class BaseScraper:
    def __init__(self, config: ScraperConfig, metrics: Optional[MetricsCollector] = None,
                 verbose: bool = False):
        self.config = config
        self.category = config.category

        self.run_id = self._new_run_id()
        self.metrics = metrics or get_metrics_collector()

        setup_logging(run_id=self.run_id, category=self.category, verbose=verbose)

    def _new_run_id(self) -> str:
        self.run_timestamp = datetime.now()
        return f"{self.category}_{self.run_timestamp.strftime('%Y%m%d_%H%M%S_%f')}"

    # -- Override in subclasses --

    def traverse(self, page: Page, state: RunState) -> List[ListingRecord]:
        raise NotImplementedError

    def save_results(self, records: List[ListingRecord]):
        raise NotImplementedError

    # -- Shared infrastructure --

    @contextmanager
    def browser_session(self) -> Iterator[Page]:
        """Launch Chromium and yield a single page; the browser is always closed."""
        with sync_playwright() as p:
            browser = p.chromium.launch(headless=self.config.headless)
            try:
                context = browser.new_context()
                yield context.new_page()
            finally:
                browser.close()
                logger.debug("Browser closed")

    def run(self) -> RunResult:
        """Main entry point. Never raises ScraperError; the result carries it."""
        self.run_id = self._new_run_id()
        state = RunState()
        persisted = None

        self.metrics.start_run(self.run_id, self.category, self.config.start_url)
        logger.info(f"[{self.category}] Starting run {self.run_id}")

        try:
            with self.browser_session() as page:
                records = self.traverse(page, state)
                state.status = RunStatus.DONE
                persisted = self.save_results(records)

        except ScraperError as e:
            state.fail(e)
            logger.error(
                f"Error while scraping: page {state.page_index}: "
                f"{state.current_url or self.config.start_url}: {e}"
            )
            self._finish_metrics(state)
            return self._result(state)

        except Exception as e:
            state.fail(e)
            logger.exception(f"[{self.category}] Run {self.run_id} failed")
            self._finish_metrics(state)
            raise

        self._finish_metrics(state, persisted)
        logger.info(f"[{self.category}] Run {self.run_id} completed successfully")
        return self._result(state, persisted)

    def _finish_metrics(self, state: RunState, persisted=None):
        self.metrics.finish_run(
            status="success" if state.status is RunStatus.DONE else "failed",
            total_pages=state.total_pages,
            pages_visited=state.pages_visited,
            products_scraped=len(state.results),
            extraction_gaps_count=state.extraction_gaps,
            images_downloaded=getattr(persisted, "images_downloaded", None),
            download_errors_count=getattr(persisted, "download_errors_count", None),
            output_path=str(persisted.output_path) if persisted is not None else None,
            error_message=str(state.error) if state.error else None,
        )

    def _result(self, state: RunState, persisted=None) -> RunResult:
        return RunResult(
            run_id=self.run_id,
            status=state.status,
            pages_visited=state.pages_visited,
            navigations=state.navigations,
            products_scraped=len(state.results),
            error=state.error,
            output_path=persisted.output_path if persisted is not None else None,
        )
