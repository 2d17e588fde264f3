from .catalog import CatalogScraper

SCRAPER_REGISTRY = {
    "catalog": CatalogScraper,
}
