"""
Unit tests for run configuration.

Run with: pytest tests/unit/test_config.py -v
"""

import pytest
from pathlib import Path
from pydantic import ValidationError

from src.config import CATEGORIES, DEFAULT_CONFIG_PATH, ScraperConfig, build_config, load_config


def test_start_url_construction():
    config = ScraperConfig(
        base_url="https://www.ouedkniss.com/",
        category="telephones",
        query_filter="?hasPrice=true&hasPictures=true",
    )
    assert config.start_url == "https://www.ouedkniss.com/telephones?hasPrice=true&hasPictures=true"


def test_results_dir_is_per_category():
    config = ScraperConfig(category="automobiles", output_dir="out")
    assert config.results_dir == Path("out") / "automobiles"


def test_unknown_category_rejected():
    with pytest.raises(ValidationError):
        ScraperConfig(category="bicycles")


def test_custom_category_set():
    config = ScraperConfig(category="cat", categories=("cat",))
    assert config.category == "cat"


def test_page_limit_must_be_positive():
    with pytest.raises(ValidationError):
        ScraperConfig(category="automobiles", page_limit=0)


def test_default_selectors():
    config = ScraperConfig(category="automobiles")
    assert config.selectors.container == ".search .v-lazy:nth-child(4) .search-view-item"
    assert config.selectors.next_page_link == ".search-view-pagination .pagination .v-pagination__next"


def test_build_config_merges_defaults_and_overrides(sample_raw_config):
    config = build_config(sample_raw_config, "laptops", page_limit=5, headless=None)

    assert config.category == "informatique-ordinateur-portable"
    assert config.page_limit == 5
    assert config.download_images is True
    assert config.headless is False


def test_build_config_catalog_value_wins_over_default(sample_raw_config):
    assert build_config(sample_raw_config, "laptops").page_limit == 2
    assert build_config(sample_raw_config, "telephones").page_limit == 1


def test_build_config_unknown_catalog(sample_raw_config):
    with pytest.raises(KeyError):
        build_config(sample_raw_config, "boats")


def test_bundled_config_is_valid():
    raw = load_config(DEFAULT_CONFIG_PATH)
    for name in raw["catalogs"]:
        config = build_config(raw, name)
        assert config.category in CATEGORIES
