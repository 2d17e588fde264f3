"""
Listing card extraction.

Reads the rendered document of the current page and turns every listing
container into a ListingRecord. Extraction is a pure read: the page HTML is
snapshotted once and parsed with BeautifulSoup, so running it twice on an
unchanged page yields identical records.

Containers without the card element, or whose card fails schema validation,
are reported as ExtractionGap and left out of the result.
"""

from typing import List, Optional, Tuple
from bs4 import BeautifulSoup, Tag
from loguru import logger
from pydantic import ValidationError

from src.config import Selectors
from src.schemas.listing import ListingRecord
from src.exceptions import ExtractionGap


def _text(node: Optional[Tag]) -> str:
    return node.get_text().strip() if node is not None else ""


def _nth_text(nodes: List[Tag], index: int) -> str:
    return _text(nodes[index]) if len(nodes) > index else ""


class ContentExtractor:
    def __init__(self, selectors: Selectors):
        self.selectors = selectors
        self.gaps: List[ExtractionGap] = []

    def extract(self, page) -> List[ListingRecord]:
        """Extract listings from a loaded Playwright page."""
        return self.parse(page.content())

    def parse(self, html: str) -> List[ListingRecord]:
        """
        Parse listing records out of a rendered HTML document.

        Args:
            html: Full document HTML

        Returns:
            Records in DOM order; gaps are recorded in `self.gaps`
        """
        soup = BeautifulSoup(html, "html.parser")
        records = []
        self.gaps = []

        for position, container in enumerate(soup.select(self.selectors.container)):
            try:
                records.append(self._parse_container(position, container))
            except ExtractionGap as gap:
                logger.warning(str(gap))
                self.gaps.append(gap)

        return records

    def _parse_container(self, position: int, container: Tag) -> ListingRecord:
        s = self.selectors
        listing_id = container.get("id")

        card = container.select_one(s.card)
        if card is None:
            raise ExtractionGap(position, f"missing card element '{s.card}'", listing_id)

        image = card.select_one(s.image)
        value, unit = self._pair(card.select(s.price))
        state, relative_time = self._pair(card.select(s.others))

        raw = {
            "id": listing_id or "",
            "imageUrl": (image.get("src") or "") if image is not None else "",
            "title": _text(card.select_one(s.title)),
            "price": {"value": value, "unit": unit},
            "tags": [_text(tag) for tag in card.select(s.tags)],
            "state": state,
            "relativeTime": relative_time,
        }

        try:
            return ListingRecord.model_validate(raw)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ExtractionGap(position, f"invalid fields: {fields}", listing_id) from e

    @staticmethod
    def _pair(nodes: List[Tag]) -> Tuple[str, str]:
        return _nth_text(nodes, 0), _nth_text(nodes, 1)
