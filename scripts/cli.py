"""
Catalog Scraper CLI - single entry point for all operations.

Usage:
    python scripts/cli.py scrape laptops                  # configured page limit
    python scripts/cli.py scrape laptops --pages 3        # first 3 pages
    python scripts/cli.py scrape telephones --no-images   # skip image download
    python scripts/cli.py scrape automobiles --headless

    python scripts/cli.py list-catalogs                   # show configured catalogs
    python scripts/cli.py stats --days 30                 # run statistics

Exit status is 0 when the run completed and 1 when it failed.
"""

import argparse
import sys
from pathlib import Path
from loguru import logger
from pydantic import ValidationError

from src.config import DEFAULT_CONFIG_PATH, build_config, load_config
from src.ingest.scrapers import SCRAPER_REGISTRY
from src.observability.logging_config import setup_logging


# ── Commands ────────────────────────────────────────────────

def cmd_scrape(args, raw_config) -> int:
    try:
        config = build_config(
            raw_config,
            args.catalog,
            category=args.category,
            page_limit=args.pages,
            download_images=False if args.no_images else None,
            headless=args.headless,
            output_dir=args.output,
        )
    except (KeyError, ValidationError) as e:
        logger.error(f"Invalid configuration for '{args.catalog}': {e}")
        return 2

    scraper_cls = SCRAPER_REGISTRY[args.platform]
    scraper = scraper_cls(config, verbose=args.verbose)
    result = scraper.run()

    if result.ok:
        logger.info(
            f"[{config.category}] {result.products_scraped} listings from "
            f"{result.pages_visited} pages saved to {result.output_path}"
        )
    else:
        logger.error(f"[{config.category}] Run failed: {result.error}")
    return result.exit_code


def cmd_list_catalogs(args, raw_config) -> int:
    defaults = raw_config.get("defaults", {})
    for name, cfg in raw_config.get("catalogs", {}).items():
        cfg = {**defaults, **(cfg or {})}
        print(f"  {name:20s} {cfg.get('category', '?'):35s} pages={cfg.get('page_limit', 1)}")
    return 0


def cmd_stats(args, raw_config) -> int:
    from src.observability.metrics import get_metrics_collector
    stats = get_metrics_collector().get_run_stats(days=args.days)
    print(stats.to_string(index=False))
    return 0


# ── Argument parser ─────────────────────────────────────────

def build_parser():
    parser = argparse.ArgumentParser(
        prog="catalog_scraper",
        description="Infinite-scroll catalog listing scraper",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH,
                        help="Path to catalogs.yaml")
    sub = parser.add_subparsers(dest="command")

    # scrape
    p_scrape = sub.add_parser("scrape", help="Scrape a configured catalog")
    p_scrape.add_argument("catalog", help="Catalog name from catalogs.yaml (e.g. laptops)")
    p_scrape.add_argument("--category", type=str, help="Override the category path")
    p_scrape.add_argument("--pages", type=int, help="Max pages to scrape")
    p_scrape.add_argument("--no-images", action="store_true", help="Skip image download")
    p_scrape.add_argument("--output", type=str, help="Results root directory")
    p_scrape.add_argument("--platform", default="catalog", choices=sorted(SCRAPER_REGISTRY))
    headless = p_scrape.add_mutually_exclusive_group()
    headless.add_argument("--headless", dest="headless", action="store_true", default=None)
    headless.add_argument("--headed", dest="headless", action="store_false")

    # list-catalogs
    sub.add_parser("list-catalogs", help="List configured catalogs")

    # stats
    p_stats = sub.add_parser("stats", help="Show run statistics")
    p_stats.add_argument("--days", type=int, default=7)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(run_id="cli", category="cli", verbose=args.verbose)
    raw_config = load_config(args.config)

    commands = {
        "scrape": cmd_scrape,
        "list-catalogs": cmd_list_catalogs,
        "stats": cmd_stats,
    }
    return commands[args.command](args, raw_config)


if __name__ == "__main__":
    sys.exit(main())
