"""Single entry point for scraping one retailer's inventory.

Resolves the retailer scraper from a free-text store name and runs it.
Scrapers already recover from live failures with fallback data, so the
only errors that reach callers are unsupported retailers and unexpected
bugs, both raised as InventoryError.
"""

from typing import Any

from grocerybag.config import Settings, get_settings
from grocerybag.ingest.schemas import InventoryResponse
from grocerybag.ingest.scrapers import RunMode, get_scraper_for_store, resolve_run_mode
from grocerybag.logging_config import get_logger

logger = get_logger(__name__)


class InventoryError(Exception):
    """Inventory lookup failed; carries the request that caused it."""

    def __init__(
        self,
        message: str,
        store: str | None = None,
        query: str | None = None,
        zip_code: str | None = None,
    ):
        super().__init__(message)
        self.store = store
        self.query = query
        self.zip_code = zip_code


class UnsupportedRetailerError(InventoryError):
    """No scraper matches the requested store name."""

    def __init__(self, store_name: str, query: str | None = None, zip_code: str | None = None):
        super().__init__(
            f"No scraper available for store: {store_name}",
            store=store_name,
            query=query,
            zip_code=zip_code,
        )


async def scrape_inventory(
    store_name: str,
    query: str,
    zip_code: str,
    *,
    run_mode: RunMode | None = None,
    settings: Settings | None = None,
    **scraper_kwargs: Any,
) -> InventoryResponse:
    """
    Scrape inventory for a store near a ZIP code.

    Args:
        store_name: Retailer name, matched leniently ("walmart", "Trader Joes").
        query: Free-text product search term.
        zip_code: Shopper ZIP code.
        run_mode: Force LIVE or FALLBACK; resolved from settings if omitted.
        settings: Application settings.
        **scraper_kwargs: Extra scraper constructor arguments
            (session_factory, rng).

    Returns:
        The inventory for the first store found.

    Raises:
        UnsupportedRetailerError: If no scraper handles store_name.
        InventoryError: If the scraper fails unexpectedly.
    """
    settings = settings or get_settings()
    run_mode = RunMode(run_mode) if run_mode else resolve_run_mode(settings)

    scraper = get_scraper_for_store(
        store_name, run_mode=run_mode, settings=settings, **scraper_kwargs
    )
    if scraper is None:
        logger.warning(f"No scraper available for store: {store_name!r}")
        raise UnsupportedRetailerError(store_name, query=query, zip_code=zip_code)

    logger.info(f"Scraping {scraper.name} for '{query}' near {zip_code} ({run_mode.value})")
    try:
        return await scraper.scrape_inventory(query, zip_code)
    except Exception as e:
        logger.error(f"Inventory scrape failed for {scraper.name}: {e}")
        raise InventoryError(
            f"Failed to scrape {store_name} inventory: {e}",
            store=store_name,
            query=query,
            zip_code=zip_code,
        ) from e
