"""
Pagination navigator.

Advances the catalog to the next page by clicking the pagination "next"
control, then waits until the rendered listings differ from the ones on the
page being left. The old container stays in the DOM while the next page
loads. A missing control or a click
that does not change the listings is a hard error; there is no retry.
"""

from loguru import logger
from playwright.sync_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from src.config import ScraperConfig
from src.exceptions import NavigationTimeout, PaginationError

# Ids of every listing container, in DOM order
LISTING_SIGNATURE_JS = """(selector) =>
    Array.from(document.querySelectorAll(selector), (el) => el.getAttribute("id") ?? "").join(",")"""

LISTINGS_CHANGED_JS = """({ selector, before }) => {
    const now = Array.from(document.querySelectorAll(selector), (el) => el.getAttribute("id") ?? "").join(",");
    return now !== "" && now !== before;
}"""


class PaginationNavigator:
    def __init__(self, config: ScraperConfig):
        self.selectors = config.selectors
        self.selector_timeout_ms = config.selector_timeout_ms
        self.navigation_timeout_ms = config.navigation_timeout_ms

    def read_total_pages(self, page: Page) -> int:
        """
        Read the total page count from the pagination element.

        Defaults to 1 when the attribute is absent or not a positive integer.

        Raises:
            NavigationTimeout: pagination UI never rendered
        """
        pagination = self.selectors.pagination
        try:
            page.wait_for_selector(pagination, timeout=self.selector_timeout_ms)
        except PlaywrightTimeout as e:
            raise NavigationTimeout(pagination, self.selector_timeout_ms, page.url) from e

        raw = page.get_attribute(pagination, self.selectors.total_pages_attribute)
        try:
            total = int(str(raw).strip())
        except (TypeError, ValueError):
            logger.debug(f"Unreadable page count {raw!r}, defaulting to 1")
            return 1
        return total if total >= 1 else 1

    def go_to_next_page(self, page: Page, page_index: int) -> None:
        """
        Click "next" and wait for the listing container of the new page.

        Args:
            page: Playwright page
            page_index: 1-based index of the page being left

        Raises:
            PaginationError: control missing or transition did not render listings
        """
        next_link = self.selectors.next_page_link
        try:
            page.wait_for_selector(next_link, timeout=self.selector_timeout_ms)
        except PlaywrightTimeout as e:
            raise PaginationError(page_index, page.url, "next page control not found") from e

        locator = page.locator(next_link)
        if locator.count() == 0:
            raise PaginationError(page_index, page.url, "next page control not found")

        container = self.selectors.container
        before = page.evaluate(LISTING_SIGNATURE_JS, container)

        try:
            locator.first.click(timeout=self.navigation_timeout_ms)
            page.wait_for_function(
                LISTINGS_CHANGED_JS,
                arg={"selector": container, "before": before},
                timeout=self.navigation_timeout_ms,
            )
            page.wait_for_selector(container, timeout=self.navigation_timeout_ms)
        except PlaywrightTimeout as e:
            raise PaginationError(page_index, page.url, "listings did not render after click") from e
        except PlaywrightError as e:
            raise PaginationError(page_index, page.url, f"click failed: {e.message}") from e

        logger.info(f"Navigating to the next page {page_index}: {page.url}")
