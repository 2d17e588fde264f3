"""
Data schemas for runtime validation.

Provides Pydantic models for validating scraped listing cards.
"""

from .listing import ListingRecord, Price

__all__ = [
    "ListingRecord",
    "Price",
]
