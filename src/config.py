"""
Run configuration for catalog scrapes.

Configuration is an explicit value handed to the scraper; nothing is read from
module globals at run time. Values come from config/catalogs.yaml (a
`defaults` block merged under each named catalog) and can be overridden from
the CLI.
"""

import yaml
from pathlib import Path
from typing import Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "catalogs.yaml"

CATEGORIES = (
    "automobiles",
    "telephones",
    "informatique-ordinateur-portable",
)


class Selectors(BaseModel):
    """CSS selectors for the catalog markup."""
    container: str = ".search .v-lazy:nth-child(4) .search-view-item"
    card: str = ".v-card.o-announ-card"
    image: str = ".o-announ-card-image img"
    title: str = "h3.o-announ-card-title"
    price: str = "span.price > span > div"
    tags: str = "div.col.py-0.px-0.my-1 > span.v-chip"
    others: str = ".mb-1.d-flex.flex-column.flex-gap-1.line-height-1 > span"
    pagination: str = ".search-view-pagination .pagination"
    next_page: Optional[str] = None
    total_pages_attribute: str = "length"

    @property
    def next_page_link(self) -> str:
        return self.next_page or f"{self.pagination} .v-pagination__next"


class ScraperConfig(BaseModel):
    base_url: str = "https://www.ouedkniss.com"
    category: str = Field(..., description="Catalog category path")
    categories: Tuple[str, ...] = CATEGORIES
    query_filter: str = "?hasPrice=true&hasPictures=true"
    page_limit: int = Field(default=1, ge=1)
    download_images: bool = True
    output_dir: str = "results"
    headless: bool = False

    # Bounds for every blocking wait (milliseconds)
    selector_timeout_ms: int = Field(default=30000, gt=0)
    network_idle_timeout_ms: int = Field(default=30000, gt=0)
    navigation_timeout_ms: int = Field(default=30000, gt=0)

    scroll_step_px: int = Field(default=100, gt=0)
    scroll_delay_ms: int = Field(default=100, ge=0)
    # Upper bound for the whole scroll-to-exhaustion loop of one page
    scroll_timeout_ms: int = Field(default=30000, gt=0)

    selectors: Selectors = Field(default_factory=Selectors)

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator('category')
    @classmethod
    def strip_category_slashes(cls, v):
        return v.strip("/")

    @model_validator(mode="after")
    def validate_category(self):
        if self.category not in self.categories:
            raise ValueError(
                f"Unknown category '{self.category}'. Available: {list(self.categories)}"
            )
        return self

    @property
    def start_url(self) -> str:
        return f"{self.base_url}/{self.category}{self.query_filter}"

    @property
    def results_dir(self) -> Path:
        return Path(self.output_dir) / self.category


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> dict:
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def build_config(raw: dict, catalog: str, **overrides) -> ScraperConfig:
    """
    Merge `defaults` with one catalog entry and any non-None overrides.

    Raises:
        KeyError: if the catalog is not configured
        pydantic.ValidationError: if the merged values are invalid
    """
    catalogs = raw.get("catalogs", {})
    if catalog not in catalogs:
        raise KeyError(f"Catalog '{catalog}' not found. Available: {list(catalogs.keys())}")

    merged = {**raw.get("defaults", {}), **(catalogs[catalog] or {})}
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return ScraperConfig.model_validate(merged)
