"""Web scrapers for grocery retailer inventory.

One scraper class per retailer, all sharing the BaseScraper pipeline.
Scrapers are looked up by free-text store name through the registry below.
"""

from typing import Any

from grocerybag.ingest.scrapers.base import BaseScraper, RunMode, ScraperError, resolve_run_mode
from grocerybag.ingest.scrapers.safeway import SafewayScraper
from grocerybag.ingest.scrapers.save_mart import SaveMartScraper
from grocerybag.ingest.scrapers.trader_joes import TraderJoesScraper
from grocerybag.ingest.scrapers.walmart import WalmartScraper

__all__ = [
    "BaseScraper",
    "RunMode",
    "ScraperError",
    "SafewayScraper",
    "SaveMartScraper",
    "TraderJoesScraper",
    "WalmartScraper",
    "SCRAPER_REGISTRY",
    "get_scraper_for_store",
    "get_available_scrapers",
    "resolve_run_mode",
]

# Registry of available scrapers by store name alias, in lookup order
SCRAPER_REGISTRY: dict[str, type[BaseScraper]] = {
    "walmart": WalmartScraper,
    "walmart supercenter": WalmartScraper,
    "walmart neighborhood market": WalmartScraper,
    "safeway": SafewayScraper,
    "trader joe's": TraderJoesScraper,
    "trader joes": TraderJoesScraper,
    "save mart": SaveMartScraper,
    "savemart": SaveMartScraper,
}


def get_scraper_for_store(store_name: str, **kwargs: Any) -> BaseScraper | None:
    """
    Get the appropriate scraper for a store.

    Args:
        store_name: Free-text store name, e.g. "Walmart" or "Trader Joe's Davis".
        **kwargs: Passed to the scraper constructor (run_mode, settings,
            session_factory, rng).

    Returns:
        A new scraper instance or None if no scraper is available.
    """
    key = (store_name or "").strip().lower()
    if not key:
        return None

    # Try direct match first
    scraper_class = SCRAPER_REGISTRY.get(key)

    # Fall back to containment either way ("walmart davis", "mart")
    if not scraper_class:
        for alias, cls in SCRAPER_REGISTRY.items():
            if alias in key or key in alias:
                scraper_class = cls
                break

    if scraper_class:
        return scraper_class(**kwargs)

    return None


def get_available_scrapers() -> list[str]:
    """Get display names of supported retailers, in registry order."""
    names: list[str] = []
    for cls in SCRAPER_REGISTRY.values():
        if cls.STORE_NAME not in names:
            names.append(cls.STORE_NAME)
    return names
