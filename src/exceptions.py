"""
Scraper error taxonomy.

Run-fatal:
- NavigationTimeout: a required element never appeared within its wait bound
- PaginationError: the next-page control is missing or the click did not
  render a fresh listing container

Per-item (logged and skipped, never abort the run):
- ExtractionGap: a listing container lacked its mandatory card element
- DownloadError: one image could not be fetched or decoded
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all scraper errors."""


class NavigationTimeout(ScraperError):
    def __init__(self, target: str, timeout_ms: int, url: Optional[str] = None,
                 page_index: Optional[int] = None):
        self.target = target
        self.timeout_ms = timeout_ms
        self.url = url
        self.page_index = page_index
        super().__init__(
            f"'{target}' not ready within {timeout_ms}ms"
            f" (page {page_index}: {url})"
        )


class PaginationError(ScraperError):
    def __init__(self, page_index: int, url: str, reason: str = "next page control not found"):
        self.page_index = page_index
        self.url = url
        self.reason = reason
        super().__init__(f"Can't navigate to the next page: {page_index}: {url} ({reason})")


class ExtractionGap(ScraperError):
    def __init__(self, position: int, reason: str, listing_id: Optional[str] = None):
        self.position = position
        self.reason = reason
        self.listing_id = listing_id
        super().__init__(f"Listing #{position} ({listing_id or 'no id'}) skipped: {reason}")


class DownloadError(ScraperError):
    def __init__(self, listing_id: str, url: str, reason: str):
        self.listing_id = listing_id
        self.url = url
        self.reason = reason
        super().__init__(f"Image download failed for {listing_id}: {reason}")
