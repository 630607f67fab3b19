"""Safeway scraper.

Safeway has no usable search results without a signed-in session, so
the weekly sale-prices page is scraped and filtered locally by query.
"""

from typing import Any

from grocerybag.ingest.schemas import Store
from grocerybag.ingest.scrapers.base import BaseScraper
from grocerybag.ingest.scrapers.selectors import card_cascade

ZIP_INPUTS = (
    'input[placeholder*="ZIP"]',
    'input[placeholder*="zip"]',
    'input[name*="zip"]',
    "#store-search-input",
)


class SafewayScraper(BaseScraper):
    """Scraper for Safeway store locator and sale prices."""

    STORE_NAME = "Safeway"
    STORE_SLUG = "safeway"
    BASE_URL = "https://www.safeway.com"
    STORE_LOCATOR_URL = "https://www.safeway.com/stores/"
    DEALS_URL = "https://www.safeway.com/shop/deals/sale-prices.html"

    STORE_KEYWORDS = ("safeway",)
    STORE_SEARCH_INPUT_SELECTORS = ZIP_INPUTS
    LOCATION_TRIGGER_SELECTORS = ('[data-testid="store-selector"]',)
    LOCATION_INPUT_SELECTORS = ('input[placeholder*="ZIP"]',)

    MAX_STORES = 5
    MAX_PRODUCTS = 20
    FILTERS_LOCALLY = True
    WIDEN_LIMIT = 10

    STORE_CASCADE = card_cascade(
        "safeway stores",
        [".store-card", ".store-item", ".location-card", '[data-testid="store"]'],
        text={
            "name": ["h3", "h4", ".store-name", ".location-name"],
            "address": [".address", ".store-address", ".location-address"],
            "distance": [".distance", ".store-distance"],
        },
        id_attributes=["data-store-id"],
        limit=10,
    )

    PRODUCT_CASCADE = card_cascade(
        "safeway products",
        ['[data-testid="product-card"]', ".product-card", ".product-item", ".sale-item"],
        text={
            "name": ["h3", ".product-title", ".product-name", '[data-testid="product-title"]'],
            "price": [".sale-price", ".price", '[data-testid="price"]'],
            "original_price": [".original-price", ".regular-price", ".was-price"],
        },
        images={"image": ["img"]},
        links={"link": ["a"]},
        flags={"out_of_stock": [".out-of-stock", '[data-testid="out-of-stock"]']},
        limit=40,
    )

    def search_url(self, query: str, zip_code: str) -> str:
        return self.DEALS_URL

    def _build_store(self, raw: dict[str, Any], index: int, zip_code: str) -> Store | None:
        """Safeway listings need both a name and an address."""
        name = (raw.get("name") or "").strip()
        address = (raw.get("address") or "").strip()
        if not name or not address:
            return None
        return Store(
            id=raw.get("id") or f"safeway-{zip_code}-{index}",
            name=name if "safeway" in name.lower() else f"Safeway - {name}",
            address=address,
            distance=(raw.get("distance") or "").strip() or None,
        )
