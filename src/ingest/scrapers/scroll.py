"""
Infinite-scroll driver.

The catalog lazy-loads batches of cards as the viewport nears the bottom, so a
single jump to the end is not enough: every batch extends the scrollable
height. The driver scrolls in fixed steps, re-measuring the document height
before each step, and stops once the cumulative distance reaches the last
measured height. It then waits for the network to go idle.
"""

import time
from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeout

from src.config import ScraperConfig
from src.exceptions import NavigationTimeout

SCROLL_HEIGHT_JS = "document.body.scrollHeight"
SCROLL_BY_JS = "(distance) => window.scrollBy(0, distance)"


class InfiniteScrollDriver:
    def __init__(self, config: ScraperConfig):
        self.container_selector = config.selectors.container
        self.selector_timeout_ms = config.selector_timeout_ms
        self.network_idle_timeout_ms = config.network_idle_timeout_ms
        self.step_px = config.scroll_step_px
        self.delay_ms = config.scroll_delay_ms
        self.scroll_timeout_ms = config.scroll_timeout_ms

    def exhaust_scroll(self, page: Page, page_index: int = None) -> int:
        """
        Scroll the current page until no more content is loaded.

        Args:
            page: Playwright page
            page_index: 1-based page number, for logging and errors

        Returns:
            Total scrolled distance in pixels

        Raises:
            NavigationTimeout: listing container never appeared, or the page
                kept growing past scroll_timeout_ms
        """
        logger.info(f"scroll down until no more content in page : {page_index}")

        page.keyboard.press("End")
        try:
            page.wait_for_selector(self.container_selector, timeout=self.selector_timeout_ms)
        except PlaywrightTimeout as e:
            raise NavigationTimeout(
                self.container_selector, self.selector_timeout_ms, page.url, page_index
            ) from e

        total_height = 0
        steps = 0
        deadline = time.monotonic() + self.scroll_timeout_ms / 1000
        while True:
            scroll_height = page.evaluate(SCROLL_HEIGHT_JS)
            page.evaluate(SCROLL_BY_JS, self.step_px)
            total_height += self.step_px
            steps += 1
            if total_height >= scroll_height:
                break
            if time.monotonic() >= deadline:
                raise NavigationTimeout(
                    self.container_selector, self.scroll_timeout_ms, page.url, page_index
                )
            page.wait_for_timeout(self.delay_ms)

        logger.debug(f"Page {page_index}: scrolled {total_height}px in {steps} steps")
        self.wait_for_network_idle(page)
        return total_height

    def wait_for_network_idle(self, page: Page) -> bool:
        """Returns False if the page kept the network busy past the bound."""
        try:
            page.wait_for_load_state("networkidle", timeout=self.network_idle_timeout_ms)
            return True
        except PlaywrightTimeout:
            # Pages with constant polling never go idle
            logger.warning(
                f"Network did not go idle within {self.network_idle_timeout_ms}ms: {page.url}"
            )
            return False
