"""
Pydantic schemas for catalog listing cards.

A ListingRecord is one product card scraped from a catalog page. Records are
validated right after extraction; a card that fails validation is logged and
skipped so a single broken card never aborts the page.

Usage:
    from src.schemas.listing import ListingRecord

    try:
        record = ListingRecord.model_validate(raw_card)
    except ValidationError as e:
        logger.warning(f"Invalid listing card: {e}")
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Price(BaseModel):
    """Two-part price as rendered on the card (e.g. "85 000" / "DA")."""
    model_config = ConfigDict(str_strip_whitespace=True)

    value: str = Field(default="", description="Price amount text")
    unit: str = Field(default="", description="Currency or unit label")

    def formatted(self) -> str:
        return f"{self.value} {self.unit}"


class ListingRecord(BaseModel):
    """
    One scraped listing.

    `id` is the stable identifier from the source markup. It is the join key
    across outputs and the stem of the downloaded image file name.
    """
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: str = Field(..., min_length=1, description="Listing id from the card container")
    imageUrl: str = Field(default="", description="Remote image URL or base64 data URI")
    title: str = Field(default="", description="Card title")
    price: Price = Field(default_factory=Price)
    tags: List[str] = Field(default_factory=list, description="Tag chips in DOM order")
    state: str = Field(default="", description="Condition/status label")
    relativeTime: str = Field(default="", description="Time since posted label")

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        """Ids end up in file names, path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"id cannot contain path separators: {v!r}")
        return v

    def to_csv_row(self) -> dict:
        """Flatten to the tabular export layout."""
        return {
            "id": self.id,
            "img": self.imageUrl,
            "title": self.title,
            "price": self.price.formatted(),
            "infos": ", ".join(self.tags),
            "others": f"{self.state} {self.relativeTime}",
        }
